# Trackr_app/models/user.py

import uuid

from flask_login import UserMixin

from Trackr_app.extensions import db
from Trackr_app.utils import local_now, isoformat


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    # OIDC "sub" claim when created through login
    id = db.Column(db.String(255), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=True)
    first_name = db.Column(db.String(255))
    last_name = db.Column(db.String(255))
    profile_image_url = db.Column(db.String(1024))
    created_at = db.Column(db.DateTime, default=local_now)
    updated_at = db.Column(db.DateTime, default=local_now)

    # user.trades
    trades = db.relationship('Trade', backref='user', lazy=True, cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'profileImageUrl': self.profile_image_url,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<User {self.id} {self.email}>'
