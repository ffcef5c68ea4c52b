"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for Strands:
users, friendships, groups, group_members, group_invites, group_read_status,
media, strands, strand_media, strand_group_shares, strand_pins, strand_fires,
strand_comments.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("profile_picture_url", sa.String(1000), nullable=True),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # --- friendships ---
    op.create_table(
        "friendships",
        sa.Column("friendship_id", sa.String(36), primary_key=True),
        sa.Column("user_a_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_b_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("requested_by", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "accepted", "blocked", name="friendshipstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_a_id", "user_b_id", name="uq_friendships_pair"),
        sa.CheckConstraint("user_a_id < user_b_id", name="ck_friendships_ordered"),
    )
    op.create_index("ix_friendships_user_a_id", "friendships", ["user_a_id"])
    op.create_index("ix_friendships_user_b_id", "friendships", ["user_b_id"])

    # --- groups ---
    op.create_table(
        "groups",
        sa.Column("group_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- group_members ---
    op.create_table(
        "group_members",
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", sa.Enum("admin", "member", name="grouprole"), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_group_members_user_id", "group_members", ["user_id"])

    # --- group_invites ---
    op.create_table(
        "group_invites",
        sa.Column("invite_id", sa.String(36), primary_key=True),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_group_invites_token", "group_invites", ["token"], unique=True)
    op.create_index("ix_group_invites_group_id", "group_invites", ["group_id"])
    op.create_index("ix_group_invites_expires_at", "group_invites", ["expires_at"])

    # --- group_read_status ---
    op.create_table(
        "group_read_status",
        sa.Column("read_status_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("last_read_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "group_id", name="uq_group_read_status_user_group"),
    )
    op.create_index("ix_group_read_status_group_id", "group_read_status", ["group_id"])

    # --- media ---
    op.create_table(
        "media",
        sa.Column("media_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("media_url", sa.String(2000), nullable=False),
        sa.Column("thumbnail_url", sa.String(2000), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_size", sa.Integer, nullable=False),
        sa.Column("mime_type", sa.String(50), nullable=False),
        sa.Column("media_type", sa.Enum("image", "video", "audio", name="mediatype"), nullable=False, server_default="image"),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("width", sa.Integer, nullable=True),
        sa.Column("height", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_media_user_id", "media", ["user_id"])

    # --- strands ---
    op.create_table(
        "strands",
        sa.Column("strand_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_strands_user_id", "strands", ["user_id"])
    op.create_index("ix_strands_created_at", "strands", ["created_at"])

    # --- strand_media ---
    op.create_table(
        "strand_media",
        sa.Column("strand_id", sa.String(36), sa.ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("media_id", sa.String(36), sa.ForeignKey("media.media_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
    )

    # --- strand_group_shares ---
    op.create_table(
        "strand_group_shares",
        sa.Column("strand_id", sa.String(36), sa.ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_strand_group_shares_group_id", "strand_group_shares", ["group_id"])

    # --- strand_pins ---
    op.create_table(
        "strand_pins",
        sa.Column("strand_id", sa.String(36), sa.ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("pinned_by", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("pinned_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_strand_pins_group_id", "strand_pins", ["group_id"])
    op.create_index("ix_strand_pins_pinned_at", "strand_pins", ["pinned_at"])

    # --- strand_fires ---
    op.create_table(
        "strand_fires",
        sa.Column("strand_id", sa.String(36), sa.ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_strand_fires_user_id", "strand_fires", ["user_id"])

    # --- strand_comments ---
    op.create_table(
        "strand_comments",
        sa.Column("comment_id", sa.String(36), primary_key=True),
        sa.Column("strand_id", sa.String(36), sa.ForeignKey("strands.strand_id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_strand_comments_strand_id", "strand_comments", ["strand_id"])
    op.create_index("ix_strand_comments_user_id", "strand_comments", ["user_id"])
    op.create_index("ix_strand_comments_group_id", "strand_comments", ["group_id"])
    op.create_index("ix_strand_comments_created_at", "strand_comments", ["created_at"])


def downgrade() -> None:
    op.drop_table("strand_comments")
    op.drop_table("strand_fires")
    op.drop_table("strand_pins")
    op.drop_table("strand_group_shares")
    op.drop_table("strand_media")
    op.drop_table("strands")
    op.drop_table("media")
    op.drop_table("group_read_status")
    op.drop_table("group_invites")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("friendships")
    op.drop_table("users")
    sa.Enum(name="mediatype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="grouprole").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="friendshipstatus").drop(op.get_bind(), checkfirst=True)
