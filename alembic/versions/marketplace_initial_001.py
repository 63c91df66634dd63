"""Initial marketplace schema

Creates:
1. users
2. influencer_profiles, social_accounts, kyc_documents
3. brand_profiles
4. campaigns, campaign_deliverables, campaign_applications,
   selected_influencers, proof_of_work
5. chats, chat_participants, chat_messages, message_reads

Revision ID: marketplace_initial_001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = 'marketplace_initial_001'
down_revision = None
branch_labels = None
depends_on = None


def _enum(name, *values):
    return sa.Enum(*values, name=name)


def upgrade():
    # 1. Users
    op.create_table('users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', _enum('userrole', 'brand', 'influencer', 'admin'), nullable=False),
        sa.Column('is_active', sa.Boolean, default=True),
        sa.Column('last_login_at', sa.DateTime),
        sa.Column('created_at', sa.DateTime),
        sa.Column('updated_at', sa.DateTime),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # 2. Influencer profiles
    op.create_table('influencer_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('bio', sa.String(500)),
        sa.Column('profile_picture_url', sa.String(500)),
        sa.Column('niches', sa.JSON),
        sa.Column('location', sa.JSON),
        sa.Column('status', _enum('influencerstatusdb', 'pending_verification', 'approved', 'rejected')),
        sa.Column('rejection_reason', sa.Text),
        sa.Column('approved_at', sa.DateTime),
        sa.Column('popularity_trend', _enum('popularitytrenddb', 'rising', 'stable', 'declining')),
        sa.Column('total_followers', sa.Integer, default=0),
        sa.Column('average_engagement', sa.Float, default=0.0),
        sa.Column('completed_campaigns', sa.Integer, default=0),
        sa.Column('rating', sa.Float, default=0.0),
        sa.Column('created_at', sa.DateTime),
        sa.Column('updated_at', sa.DateTime),
    )

    op.create_table('social_accounts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('influencer_id', sa.String(36), sa.ForeignKey('influencer_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('platform', _enum('socialplatformdb', 'instagram', 'youtube', 'tiktok', 'twitter'), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('follower_count', sa.Integer, default=0),
        sa.Column('engagement_rate', sa.Float, default=0.0),
        sa.Column('verified', sa.Boolean, default=False),
        sa.Column('created_at', sa.DateTime),
    )

    op.create_table('kyc_documents',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('influencer_id', sa.String(36), sa.ForeignKey('influencer_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', _enum('kycdocumenttypedb', 'passport', 'driving_license', 'national_id'), nullable=False),
        sa.Column('document_url', sa.String(500), nullable=False),
        sa.Column('verified', sa.Boolean, default=False),
        sa.Column('uploaded_at', sa.DateTime),
    )

    # 3. Brand profiles
    op.create_table('brand_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('website', sa.String(500), nullable=False),
        sa.Column('industry', sa.String(50), nullable=False),
        sa.Column('description', sa.String(1000)),
        sa.Column('logo_url', sa.String(500)),
        sa.Column('contact_person', sa.JSON),
        sa.Column('location', sa.JSON),
        sa.Column('social_media', sa.JSON),
        sa.Column('subscription_plan', _enum('subscriptionplandb', 'basic', 'premium', 'enterprise')),
        sa.Column('subscription_status', _enum('subscriptionstatusdb', 'active', 'inactive', 'pending')),
        sa.Column('subscription_start', sa.DateTime),
        sa.Column('subscription_end', sa.DateTime),
        sa.Column('payment_status', _enum('paymentstatusdb', 'paid', 'pending', 'failed')),
        sa.Column('campaigns_created', sa.Integer, default=0),
        sa.Column('total_spent', sa.Float, default=0.0),
        sa.Column('rating', sa.Float, default=0.0),
        sa.Column('verified', sa.Boolean, default=False),
        sa.Column('created_at', sa.DateTime),
        sa.Column('updated_at', sa.DateTime),
    )

    # 4. Campaigns
    op.create_table('campaigns',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('brand_id', sa.String(36), sa.ForeignKey('brand_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('category', _enum('categorydb', 'fashion', 'beauty', 'fitness', 'food', 'travel',
                                    'tech', 'lifestyle', 'gaming', 'education', 'business'), nullable=False),
        sa.Column('budget_min', sa.Float, nullable=False),
        sa.Column('budget_max', sa.Float, nullable=False),
        sa.Column('currency', sa.String(3), default='USD'),
        sa.Column('requirements', sa.JSON),
        sa.Column('application_deadline', sa.DateTime, nullable=False),
        sa.Column('campaign_start', sa.DateTime, nullable=False),
        sa.Column('campaign_end', sa.DateTime, nullable=False),
        sa.Column('status', _enum('campaignstatusdb', 'draft', 'active', 'paused', 'completed', 'cancelled')),
        sa.Column('total_budget_allocated', sa.Float, default=0.0),
        sa.Column('created_at', sa.DateTime),
        sa.Column('updated_at', sa.DateTime),
    )
    op.create_index('ix_campaigns_brand_id', 'campaigns', ['brand_id'])
    op.create_index('ix_campaigns_status', 'campaigns', ['status'])

    op.create_table('campaign_deliverables',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('campaign_id', sa.String(36), sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, default=0),
        sa.Column('type', _enum('deliverabletypedb', 'post', 'story', 'reel', 'video', 'blog'), nullable=False),
        sa.Column('platform', _enum('deliverableplatformdb', 'instagram', 'youtube', 'tiktok', 'twitter', 'blog'),
                  nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False, default=1),
        sa.Column('description', sa.Text),
    )

    op.create_table('campaign_applications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('campaign_id', sa.String(36), sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('influencer_id', sa.String(36), sa.ForeignKey('influencer_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('proposed_rate', sa.Float, nullable=False),
        sa.Column('message', sa.Text),
        sa.Column('status', _enum('applicationstatusdb', 'pending', 'accepted', 'rejected')),
        sa.Column('applied_at', sa.DateTime),
        sa.Column('reviewed_at', sa.DateTime),
        sa.UniqueConstraint('campaign_id', 'influencer_id', name='uq_application_campaign_influencer'),
    )

    op.create_table('selected_influencers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('campaign_id', sa.String(36), sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('influencer_id', sa.String(36), sa.ForeignKey('influencer_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('agreed_rate', sa.Float),
        sa.Column('status', _enum('selectionstatusdb', 'assigned', 'in_progress', 'submitted', 'approved', 'rejected')),
        sa.Column('assigned_at', sa.DateTime),
        sa.Column('started_at', sa.DateTime),
        sa.Column('submitted_at', sa.DateTime),
        sa.Column('approved_at', sa.DateTime),
        sa.Column('rejected_at', sa.DateTime),
        sa.UniqueConstraint('campaign_id', 'influencer_id', name='uq_selection_campaign_influencer'),
    )

    op.create_table('proof_of_work',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('selection_id', sa.String(36), sa.ForeignKey('selected_influencers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, default=0),
        sa.Column('url', sa.String(1000), nullable=False),
        sa.Column('platform', sa.String(50)),
        sa.Column('type', sa.String(50)),
        sa.Column('submitted_at', sa.DateTime),
    )

    # 5. Chat
    op.create_table('chats',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('chat_type', _enum('chattypedb', 'direct', 'campaign'), nullable=False),
        sa.Column('campaign_id', sa.String(36), sa.ForeignKey('campaigns.id', ondelete='SET NULL'), nullable=True),
        sa.Column('scope_key', sa.String(80), nullable=False),
        sa.Column('participant_key', sa.String(255), nullable=False),
        sa.Column('message_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('last_message_content', sa.Text),
        sa.Column('last_message_sender_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('last_message_at', sa.DateTime),
        sa.Column('is_active', sa.Boolean, default=True),
        sa.Column('created_at', sa.DateTime),
        sa.Column('updated_at', sa.DateTime),
        sa.UniqueConstraint('scope_key', 'participant_key', name='uq_chat_scope_participants'),
    )
    op.create_index('ix_chats_updated_at', 'chats', ['updated_at'])

    op.create_table('chat_participants',
        sa.Column('chat_id', sa.String(36), sa.ForeignKey('chats.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('joined_at', sa.DateTime),
    )
    op.create_index('ix_chat_participants_user_id', 'chat_participants', ['user_id'])

    op.create_table('chat_messages',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('chat_id', sa.String(36), sa.ForeignKey('chats.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('sender_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('message_type', _enum('messagetypedb', 'text', 'image', 'file'), nullable=False),
        sa.Column('file_url', sa.String(500)),
        sa.Column('file_name', sa.String(255)),
        sa.Column('created_at', sa.DateTime),
        sa.UniqueConstraint('chat_id', 'position', name='uq_message_chat_position'),
    )
    op.create_index('ix_chat_messages_chat_id', 'chat_messages', ['chat_id'])

    op.create_table('message_reads',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('message_id', sa.String(36), sa.ForeignKey('chat_messages.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('read_at', sa.DateTime),
        sa.UniqueConstraint('message_id', 'user_id', name='uq_read_message_user'),
    )
    op.create_index('ix_message_reads_message_id', 'message_reads', ['message_id'])


def downgrade():
    for table in (
        'message_reads', 'chat_messages', 'chat_participants', 'chats',
        'proof_of_work', 'selected_influencers', 'campaign_applications', 'campaign_deliverables',
        'campaigns', 'brand_profiles', 'kyc_documents', 'social_accounts', 'influencer_profiles', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in (
        'messagetypedb', 'chattypedb', 'selectionstatusdb', 'applicationstatusdb', 'deliverableplatformdb',
        'deliverabletypedb', 'campaignstatusdb', 'categorydb', 'paymentstatusdb', 'subscriptionstatusdb',
        'subscriptionplandb', 'kycdocumenttypedb', 'socialplatformdb', 'popularitytrenddb',
        'influencerstatusdb', 'userrole',
    ):
        sa.Enum(name=name).drop(bind, checkfirst=True)
