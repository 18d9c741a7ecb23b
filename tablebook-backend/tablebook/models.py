
from sqlalchemy import CheckConstraint, UniqueConstraint, func
from .extensions import db

class User(db.Model):
    __tablename__ = "users"
    user_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    reservations = db.relationship("Reservation", back_populates="user", passive_deletes=True)

class Restaurant(db.Model):
    __tablename__ = "restaurants"
    restaurant_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, index=True)
    location = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    reservations = db.relationship("Reservation", back_populates="restaurant")

    def to_dict(self):
        return {
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "location": self.location,
            "description": self.description,
        }

class Reservation(db.Model):
    __tablename__ = "reservations"
    reservation_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.restaurant_id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.Time, nullable=False)
    people_count = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    user = db.relationship("User", back_populates="reservations")
    restaurant = db.relationship("Restaurant", back_populates="reservations")

    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", "date", "time", name="uq_reservation_user_slot"),
        CheckConstraint("people_count >= 1", name="ck_reservation_people_count"),
    )
