from bingo import db
from datetime import datetime, timezone
import string
import random

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits

DEFAULT_AIRLINES = [
    'Aer Lingus', 'Aeromexico', 'Air Canada', 'Air France', 'Air India',
    'Air New Zealand', 'Alaska Airlines', 'Alitalia', 'All Nippon Airways',
    'American Airlines', 'Avianca', 'British Airways', 'Cathay Pacific',
    'Copa Airlines', 'Delta', 'easyJet', 'Emirates', 'Ethiopian Airlines',
    'Etihad', 'EVA Air', 'Finnair', 'Frontier', 'Hawaiian Airlines', 'Iberia',
    'Icelandair', 'JetBlue', 'KLM', 'Korean Air', 'LATAM', 'Lufthansa',
    'Norwegian', 'Qantas', 'Qatar Airways', 'Ryanair', 'SAS',
    'Singapore Airlines', 'Southwest', 'Spirit', 'Swiss', 'TAP Air Portugal',
    'Turkish Airlines', 'United', 'Virgin Atlantic', 'WestJet',
]


def _utcnow():
    return datetime.now(timezone.utc)


def generate_room_code(length=6):
    """Generate a unique room code."""
    while True:
        code = ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))
        if not db.session.query(BingoRoom.id).filter_by(room_code=code).first():
            return code


class Airline(db.Model):
    __tablename__ = 'airline'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class BingoRoom(db.Model):
    __tablename__ = 'bingo_room'
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(16), unique=True, index=True, nullable=False)
    status = db.Column(db.String(16), default='WAITING', nullable=False)  # WAITING, STARTED, FINISHED
    admin_id = db.Column(db.String(128), nullable=False)
    use_free_center = db.Column(db.Boolean, default=True, nullable=False)
    winner_id = db.Column(db.String(128), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    players = db.relationship('RoomPlayer', back_populates='room', cascade='all, delete-orphan',
                              order_by='RoomPlayer.id')
    draws = db.relationship('DrawnAirline', back_populates='room', cascade='all, delete-orphan',
                            order_by='DrawnAirline.draw_order')

    def to_dict(self):
        return {
            'roomCode': self.room_code,
            'status': self.status,
            'adminId': self.admin_id,
            'useFreeCenter': self.use_free_center,
            'winnerId': self.winner_id,
            'playerCount': len(self.players),
        }


class RoomPlayer(db.Model):
    __tablename__ = 'room_player'
    __table_args__ = (db.UniqueConstraint('room_id', 'user_id', name='uq_room_player_user'),)
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('bingo_room.id'), nullable=False)
    user_id = db.Column(db.String(128), nullable=False)
    display_name = db.Column(db.String(64), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    room = db.relationship('BingoRoom', back_populates='players')
    cells = db.relationship('CardCell', back_populates='player', cascade='all, delete-orphan',
                            order_by='CardCell.id')


class CardCell(db.Model):
    __tablename__ = 'card_cell'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('room_player.id'), nullable=False)
    row = db.Column(db.Integer, nullable=False)
    col = db.Column(db.Integer, nullable=False)
    airline_name = db.Column(db.String(128), nullable=False)
    is_free = db.Column(db.Boolean, default=False, nullable=False)
    player = db.relationship('RoomPlayer', back_populates='cells')


class DrawnAirline(db.Model):
    __tablename__ = 'drawn_airline'
    __table_args__ = (
        db.UniqueConstraint('room_id', 'draw_order', name='uq_drawn_airline_order'),
        db.UniqueConstraint('room_id', 'airline_id', name='uq_drawn_airline_airline'),
    )
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('bingo_room.id'), nullable=False)
    airline_id = db.Column(db.Integer, db.ForeignKey('airline.id'), nullable=False)
    draw_order = db.Column(db.Integer, nullable=False)
    drawn_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    room = db.relationship('BingoRoom', back_populates='draws')
    airline = db.relationship('Airline')

    def to_dict(self):
        return {
            'id': self.airline_id,
            'name': self.airline.name,
            'order': self.draw_order,
        }


def seed_airlines(names=None):
    """Insert any missing airlines from ``names`` (defaults to DEFAULT_AIRLINES)."""
    existing = {a.name for a in Airline.query.all()}
    added = 0
    for name in names or DEFAULT_AIRLINES:
        if name not in existing:
            db.session.add(Airline(name=name))
            existing.add(name)
            added += 1
    db.session.commit()
    return added
