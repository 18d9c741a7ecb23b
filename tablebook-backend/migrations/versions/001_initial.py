
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'restaurants',
        sa.Column('restaurant_id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
    )
    op.create_index('ix_restaurants_name', 'restaurants', ['name'])

    op.create_table(
        'reservations',
        sa.Column('reservation_id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.restaurant_id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.Time(), nullable=False),
        sa.Column('people_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'restaurant_id', 'date', 'time', name='uq_reservation_user_slot'),
        sa.CheckConstraint('people_count >= 1', name='ck_reservation_people_count'),
    )
    op.create_index('ix_reservations_user_id', 'reservations', ['user_id'])
    op.create_index('ix_reservations_restaurant_id', 'reservations', ['restaurant_id'])

def downgrade():
    op.drop_index('ix_reservations_restaurant_id', table_name='reservations')
    op.drop_index('ix_reservations_user_id', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('ix_restaurants_name', table_name='restaurants')
    op.drop_table('restaurants')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
