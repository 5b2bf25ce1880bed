from extensions import db
from sqlalchemy import Column, Integer, String, DateTime
from werkzeug.security import generate_password_hash, check_password_hash
from utils.timezone import local_now_naive


class Device(db.Model):
    __tablename__ = 'devices'

    id = Column(Integer, primary_key=True)
    mac_addr = Column(String(32), unique=True, nullable=False)
    secret_hash = Column(String(256), nullable=False)
    name = Column(String(100), nullable=True)
    location = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=local_now_naive)

    def set_secret(self, secret):
        self.secret_hash = generate_password_hash(secret)

    def check_secret(self, secret):
        return bool(secret) and check_password_hash(self.secret_hash, secret)

    def __repr__(self):
        return f'<Device {self.mac_addr}>'
