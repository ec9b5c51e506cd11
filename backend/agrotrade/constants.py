# Overview: Closed enumerations shared by models, validation and access policies.

ROLE_DIRECTOR = "director"
ROLE_MANAGER = "manager"
ROLE_PROCUREMENT = "procurement"
ROLE_AGENT = "agent"

ROLES = (ROLE_DIRECTOR, ROLE_MANAGER, ROLE_PROCUREMENT, ROLE_AGENT)

BRANCHES = ("branch1", "branch2")

SALE_TYPE_REGULAR = "regular"
SALE_TYPE_CREDIT = "credit"
SALE_TYPES = (SALE_TYPE_REGULAR, SALE_TYPE_CREDIT)

CREDIT_PENDING = "pending"
CREDIT_PAID = "paid"
CREDIT_OVERDUE = "overdue"
CREDIT_STATUSES = (CREDIT_PENDING, CREDIT_PAID, CREDIT_OVERDUE)

# Stock strictly below this (and above zero) counts as low stock. Not configurable.
LOW_STOCK_THRESHOLD = 10
