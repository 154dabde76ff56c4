"""initial workhub schema

Revision ID: a1f0c3d2e4b5
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f0c3d2e4b5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def _emp_fk(name, nullable=True, ondelete=None, index=False):
    return sa.Column(name, sa.Integer(), sa.ForeignKey('employees.id', ondelete=ondelete),
                     nullable=nullable, index=index)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='employee'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(80), nullable=True),
    )
    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True),
        sa.Column('code', sa.String(32), nullable=False, unique=True),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('designation', sa.String(120), nullable=True),
        sa.Column('department', sa.String(120), nullable=True),
        sa.Column('experience', sa.String(60), nullable=True),
        sa.Column('date_of_joining', sa.Date(), nullable=True),
        sa.Column('work_mode', sa.String(10), nullable=False, server_default='Office'),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='employee'),
        sa.Column('status', sa.String(16), nullable=False, server_default='Active'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_emp_manager_id', 'employees', ['manager_id'])
    op.create_index('ix_emp_user_type', 'employees', ['user_type'])

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        _emp_fk('team_lead_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('added_date', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'daily_work_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('check_in', sa.DateTime(), nullable=True),
        sa.Column('check_out', sa.DateTime(), nullable=True),
        sa.Column('hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('overtime_hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('project', sa.String(160), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='Present'),
        *_timestamps(),
        sa.UniqueConstraint('employee_id', 'date', name='uq_work_log_emp_date'),
    )

    op.create_table(
        'monthly_attendance',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False, server_default='28'),
        sa.Column('working_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('permissions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('leaves', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('missed_days', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('employee_id', 'month', 'year', name='uq_monthly_att_emp_month'),
    )

    op.create_table(
        'monthly_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('month', 'year', name='uq_monthly_settings_month_year'),
    )

    op.create_table(
        'leave_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('team_lead_ids', sa.JSON(), nullable=False),
        _emp_fk('team_lead_id'),
        _emp_fk('manager_id', index=True),
        sa.Column('leave_type', sa.String(40), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='Pending Team Lead', index=True),
        sa.Column('team_lead_comments', sa.Text(), nullable=True),
        sa.Column('manager_comments', sa.Text(), nullable=True),
        sa.Column('team_lead_acted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'permission_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('team_lead_ids', sa.JSON(), nullable=False),
        _emp_fk('team_lead_id'),
        _emp_fk('manager_id', index=True),
        sa.Column('permission_type', sa.String(60), nullable=False),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='Pending Team Lead', index=True),
        sa.Column('team_lead_comments', sa.Text(), nullable=True),
        sa.Column('manager_comments', sa.Text(), nullable=True),
        sa.Column('team_lead_acted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'overtime_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('ot_date', sa.Date(), nullable=False, index=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('total_hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('work_type', sa.String(80), nullable=True),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('image1', sa.String(512), nullable=True),
        sa.Column('image2', sa.String(512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending', index=True),
        _emp_fk('team_lead_id'),
        sa.Column('team_lead_comments', sa.Text(), nullable=True),
        sa.Column('team_lead_acted_at', sa.DateTime(), nullable=True),
        _emp_fk('final_approved_by'),
        sa.Column('final_approved_at', sa.DateTime(), nullable=True),
        sa.Column('batch_id', sa.String(64), nullable=True),
        sa.Column('manager_remarks', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'work_submissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', nullable=False, ondelete='CASCADE', index=True),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('work_type', sa.String(80), nullable=False),
        sa.Column('work_description', sa.Text(), nullable=False),
        sa.Column('department', sa.String(120), nullable=True),
        sa.Column('priority', sa.String(16), nullable=False, server_default='Medium'),
        sa.Column('status', sa.String(32), nullable=False, server_default='Pending Team Lead', index=True),
        _emp_fk('team_lead_id'),
        sa.Column('team_lead_comments', sa.Text(), nullable=True),
        sa.Column('team_lead_approved_at', sa.DateTime(), nullable=True),
        sa.Column('team_lead_rejected_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        _emp_fk('manager_id'),
        sa.Column('manager_comments', sa.Text(), nullable=True),
        sa.Column('final_approved_at', sa.DateTime(), nullable=True),
        sa.Column('final_rejected_at', sa.DateTime(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'request_actions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('request_kind', sa.String(20), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('stage', sa.String(20), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('from_status', sa.String(32), nullable=True),
        sa.Column('to_status', sa.String(32), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        _emp_fk('acted_by_employee_id', ondelete='SET NULL'),
        sa.Column('acted_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_request_actions_kind_id', 'request_actions', ['request_kind', 'request_id'])

    op.create_table(
        'interns',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True),
        sa.Column('code', sa.String(32), nullable=True, unique=True),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone_number', sa.String(20), nullable=False),
        sa.Column('college', sa.String(200), nullable=False),
        sa.Column('year_or_passed_out', sa.String(40), nullable=False),
        sa.Column('department', sa.String(120), nullable=False),
        sa.Column('domain_in_office', sa.String(120), nullable=False),
        sa.Column('paid_or_unpaid', sa.String(10), nullable=False),
        sa.Column('mentor_name', sa.String(160), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='Active', index=True),
        sa.Column('aadhar_path', sa.String(512), nullable=True),
        sa.Column('photo_path', sa.String(512), nullable=True),
        sa.Column('marksheet_path', sa.String(512), nullable=True),
        sa.Column('resume_path', sa.String(512), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'intern_work_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('intern_id', sa.Integer(), sa.ForeignKey('interns.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('check_in', sa.DateTime(), nullable=True),
        sa.Column('check_out', sa.DateTime(), nullable=True),
        sa.Column('total_hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('overtime_hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('work_type', sa.String(160), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('department', sa.String(120), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('intern_id', 'date', name='uq_intern_log_intern_date'),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('recipient_type', sa.String(20), nullable=False),
        _emp_fk('recipient_id', nullable=False, ondelete='CASCADE'),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(40), nullable=False),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notifications_recipient', 'notifications', ['recipient_id', 'is_read'])

    op.create_table(
        'push_subscriptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        _emp_fk('employee_id', ondelete='CASCADE', index=True),
        sa.Column('user_type', sa.String(20), nullable=True),
        sa.Column('endpoint', sa.Text(), nullable=False, unique=True),
        sa.Column('p256dh', sa.Text(), nullable=True),
        sa.Column('auth', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        'push_subscriptions', 'notifications', 'intern_work_logs', 'interns',
        'request_actions', 'work_submissions', 'overtime_requests', 'permission_requests',
        'leave_requests', 'monthly_settings', 'monthly_attendance', 'daily_work_logs',
        'team_members', 'employees', 'user_roles', 'roles', 'users',
    ):
        op.drop_table(table)
