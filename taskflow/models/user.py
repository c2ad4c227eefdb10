# taskflow/models/user.py
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from ..extensions import db


# Stable capability keys. Display names live in the role table and may be renamed.
ROLE_CUSTOMER = "customer"
ROLE_EXECUTOR = "executor"
ROLE_ADMIN = "admin"

DEFAULT_ROLES = (
    (ROLE_CUSTOMER, "Customer"),
    (ROLE_EXECUTOR, "Executor"),
    (ROLE_ADMIN, "Administrator"),
)


class Role(db.Model):
    __tablename__ = "role"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    name = db.Column(db.String(80), nullable=False)

    def to_dict(self):
        return {"id": self.id, "code": self.code, "name": self.name}


class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255))

    role_id = db.Column(db.Integer, db.ForeignKey("role.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    role = db.relationship("Role", lazy="joined")

    # --- Auth helpers ---
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    # --- Convenience flags ---
    @property
    def role_code(self) -> str | None:
        return self.role.code if self.role else None

    @property
    def role_name(self) -> str:
        return self.role.name if self.role else "Unknown role"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role_id": self.role_id,
            "role": self.role_code,
            "role_name": self.role_name,
        }
