import enum


# Define UserRole enum
class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
