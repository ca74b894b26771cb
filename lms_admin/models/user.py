"""
Model: Panel user (admin, manager or employee)
"""
from datetime import datetime
from werkzeug.security import check_password_hash, generate_password_hash
from ..constants import UserRole, UserStatus
from ..db import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    username = db.Column(db.String(80), nullable=False, unique=True)
    employee_id = db.Column(db.String(40), nullable=False, unique=True)
    phone_number = db.Column(db.String(20), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.Enum(UserRole, native_enum=False, length=16), nullable=False, default=UserRole.EMPLOYEE)
    status = db.Column(db.Enum(UserStatus, native_enum=False, length=16), nullable=False, default=UserStatus.ACTIVE)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not password or not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE

    def to_dict(self):
        return {
            "_id": self.id,
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "username": self.username,
            "employeeId": self.employee_id,
            "phoneNumber": self.phone_number,
            "role": self.role.value if self.role else None,
            "status": self.status.value if self.status else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
