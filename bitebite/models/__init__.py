from bitebite.models.menu_item import MenuItem
from bitebite.models.order import Order
from bitebite.models.order_item import OrderItem
from bitebite.models.kv_entry import KeyValueEntry
