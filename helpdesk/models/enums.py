from enum import Enum

class UserRole(str, Enum):
    Admin = "admin"
    SuperAdmin = "super_admin"
    Department = "department"  # department accounts, scoped by department_id

class UserStatus(str, Enum):
    Active = "active"
    Inactive = "inactive"
    Deleted = "deleted"  # soft delete; rows are never removed
