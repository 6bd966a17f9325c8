"""create_schedule_core

Revision ID: 3f7a2c9d1b04
Revises:
Create Date: 2025-06-01 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f7a2c9d1b04'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Directorio de miembros (solo lectura para el motor de horarios)
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('role', sa.Enum('ADMIN', 'TRAINER', 'MEMBER', name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_user')
    )
    op.create_index('ix_user_id', 'user', ['id'], unique=False)
    op.create_index('ix_user_email', 'user', ['email'], unique=True)
    op.create_index('ix_user_first_name', 'user', ['first_name'], unique=False)
    op.create_index('ix_user_last_name', 'user', ['last_name'], unique=False)

    # Tablas de referencia
    op.create_table(
        'room',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('capacity IS NULL OR capacity > 0', name='ck_room_room_positive_capacity'),
        sa.PrimaryKeyConstraint('id', name='pk_room')
    )
    op.create_index('ix_room_id', 'room', ['id'], unique=False)

    op.create_table(
        'discipline',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_discipline')
    )
    op.create_index('ix_discipline_id', 'discipline', ['id'], unique=False)
    op.create_index('ix_discipline_slug', 'discipline', ['slug'], unique=True)

    op.create_table(
        'class_track',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_class_track')
    )
    op.create_index('ix_class_track_id', 'class_track', ['id'], unique=False)

    # Plantillas de clase (las ocurrencias no se materializan)
    op.create_table(
        'class_template',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('discipline_id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=True),
        sa.Column('track_id', sa.Integer(), nullable=True),
        sa.Column('room_id', sa.Integer(), nullable=True),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('recurrence_end_date', sa.Date(), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='ck_class_template_valid_day_of_week'),
        sa.CheckConstraint('start_time < end_time', name='ck_class_template_start_before_end'),
        sa.CheckConstraint('max_capacity IS NULL OR max_capacity > 0', name='ck_class_template_positive_max_capacity'),
        sa.ForeignKeyConstraint(['discipline_id'], ['discipline.id'], name='fk_class_template_discipline_id_discipline'),
        sa.ForeignKeyConstraint(['coach_id'], ['user.id'], name='fk_class_template_coach_id_user'),
        sa.ForeignKeyConstraint(['track_id'], ['class_track.id'], name='fk_class_template_track_id_class_track'),
        sa.ForeignKeyConstraint(['room_id'], ['room.id'], name='fk_class_template_room_id_room'),
        sa.PrimaryKeyConstraint('id', name='pk_class_template')
    )
    op.create_index('ix_class_template_id', 'class_template', ['id'], unique=False)
    op.create_index('ix_class_template_discipline_id', 'class_template', ['discipline_id'], unique=False)
    op.create_index('ix_class_template_room_id', 'class_template', ['room_id'], unique=False)
    op.create_index('ix_class_template_active_day', 'class_template', ['is_active', 'day_of_week'], unique=False)

    # Reservas por ocurrencia (clase, fecha)
    op.create_table(
        'class_reservation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('class_id', sa.Integer(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum('reserved', 'checked_in', 'cancelled', name='reservation_status'), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['user.id'], name='fk_class_reservation_member_id_user'),
        sa.ForeignKeyConstraint(['class_id'], ['class_template.id'], name='fk_class_reservation_class_id_class_template', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_class_reservation')
    )
    op.create_index('ix_class_reservation_id', 'class_reservation', ['id'], unique=False)
    op.create_index('ix_class_reservation_member_id', 'class_reservation', ['member_id'], unique=False)
    op.create_index('ix_class_reservation_occurrence', 'class_reservation', ['class_id', 'reservation_date', 'status'], unique=False)
    # Una sola reserva viva por miembro y ocurrencia
    op.create_index(
        'uq_class_reservation_active_member',
        'class_reservation',
        ['member_id', 'class_id', 'reservation_date'],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )


def downgrade():
    op.drop_index('uq_class_reservation_active_member', table_name='class_reservation')
    op.drop_index('ix_class_reservation_occurrence', table_name='class_reservation')
    op.drop_index('ix_class_reservation_member_id', table_name='class_reservation')
    op.drop_index('ix_class_reservation_id', table_name='class_reservation')
    op.drop_table('class_reservation')

    op.drop_index('ix_class_template_active_day', table_name='class_template')
    op.drop_index('ix_class_template_room_id', table_name='class_template')
    op.drop_index('ix_class_template_discipline_id', table_name='class_template')
    op.drop_index('ix_class_template_id', table_name='class_template')
    op.drop_table('class_template')

    op.drop_index('ix_class_track_id', table_name='class_track')
    op.drop_table('class_track')
    op.drop_index('ix_discipline_slug', table_name='discipline')
    op.drop_index('ix_discipline_id', table_name='discipline')
    op.drop_table('discipline')
    op.drop_index('ix_room_id', table_name='room')
    op.drop_table('room')
    op.drop_index('ix_user_last_name', table_name='user')
    op.drop_index('ix_user_first_name', table_name='user')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_index('ix_user_id', table_name='user')
    op.drop_table('user')

    sa.Enum(name='reservation_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
