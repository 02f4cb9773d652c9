"""Müşteri, poliçe, muhasebe ve poliçe dosyası tabloları

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-10-02 10:14:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

POLICE_TURLERI = ('Kasko', 'Trafik', 'Konut', 'Sağlık', 'Hayat', 'Diğer')
POLICE_DURUMLARI = ('Aktif', 'Pasif', 'İptal')
MUHASEBE_TIPLERI = ('Gelir', 'Gider')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ad', sa.String(), nullable=False),
        sa.Column('tc_kimlik_no', sa.String(length=11), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('telefon', sa.String(), nullable=True),
        sa.Column('adres', sa.Text(), nullable=True),
        sa.Column('olusturma_tarihi', sa.DateTime(), nullable=True),
        sa.Column('guncelleme_tarihi', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('customers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_customers_ad'), ['ad'], unique=False)
        batch_op.create_index(batch_op.f('ix_customers_id'), ['id'], unique=False)
        batch_op.create_index(batch_op.f('ix_customers_tc_kimlik_no'), ['tc_kimlik_no'], unique=False)

    op.create_table('policies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('police_no', sa.String(), nullable=False),
        sa.Column('musteri_id', sa.Integer(), nullable=False),
        sa.Column('musteri_adi', sa.String(), nullable=True),
        sa.Column('tc_kimlik_no', sa.String(length=11), nullable=True),
        sa.Column('plaka_no', sa.String(), nullable=True),
        sa.Column('baslangic_tarihi', sa.Date(), nullable=False),
        sa.Column('bitis_tarihi', sa.Date(), nullable=False),
        sa.Column('prim', sa.Float(), nullable=False),
        sa.Column('police_turu', sa.Enum(*POLICE_TURLERI, name='policeturuenum', native_enum=False, length=20), nullable=False),
        sa.Column('durum', sa.Enum(*POLICE_DURUMLARI, name='policedurumenum', native_enum=False, length=20), nullable=False),
        sa.Column('aciklama', sa.Text(), nullable=True),
        sa.Column('olusturma_tarihi', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['musteri_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('policies', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_policies_id'), ['id'], unique=False)
        batch_op.create_index(batch_op.f('ix_policies_musteri_id'), ['musteri_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_policies_plaka_no'), ['plaka_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_policies_police_no'), ['police_no'], unique=True)

    op.create_table('accounting',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('musteri_id', sa.Integer(), nullable=False),
        sa.Column('police_id', sa.Integer(), nullable=True),
        sa.Column('plaka_no', sa.String(), nullable=True),
        sa.Column('islem_tarihi', sa.Date(), nullable=False),
        sa.Column('tutar', sa.Float(), nullable=False),
        sa.Column('tip', sa.Enum(*MUHASEBE_TIPLERI, name='muhasebetipenum', native_enum=False, length=20), nullable=False),
        sa.Column('aciklama', sa.Text(), nullable=True),
        sa.Column('olusturma_tarihi', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['musteri_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['police_id'], ['policies.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('accounting', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_accounting_id'), ['id'], unique=False)
        batch_op.create_index(batch_op.f('ix_accounting_islem_tarihi'), ['islem_tarihi'], unique=False)
        batch_op.create_index(batch_op.f('ix_accounting_musteri_id'), ['musteri_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_accounting_plaka_no'), ['plaka_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_accounting_police_id'), ['police_id'], unique=False)

    op.create_table('policy_files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('police_id', sa.Integer(), nullable=False),
        sa.Column('ad', sa.String(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('mime_tipi', sa.String(), nullable=False),
        sa.Column('boyut', sa.Integer(), nullable=False),
        sa.Column('olusturma_tarihi', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['police_id'], ['policies.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('policy_files', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_policy_files_id'), ['id'], unique=False)
        batch_op.create_index(batch_op.f('ix_policy_files_police_id'), ['police_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('policy_files', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_policy_files_police_id'))
        batch_op.drop_index(batch_op.f('ix_policy_files_id'))
    op.drop_table('policy_files')

    with op.batch_alter_table('accounting', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_accounting_police_id'))
        batch_op.drop_index(batch_op.f('ix_accounting_plaka_no'))
        batch_op.drop_index(batch_op.f('ix_accounting_musteri_id'))
        batch_op.drop_index(batch_op.f('ix_accounting_islem_tarihi'))
        batch_op.drop_index(batch_op.f('ix_accounting_id'))
    op.drop_table('accounting')

    with op.batch_alter_table('policies', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_policies_police_no'))
        batch_op.drop_index(batch_op.f('ix_policies_plaka_no'))
        batch_op.drop_index(batch_op.f('ix_policies_musteri_id'))
        batch_op.drop_index(batch_op.f('ix_policies_id'))
    op.drop_table('policies')

    with op.batch_alter_table('customers', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_customers_tc_kimlik_no'))
        batch_op.drop_index(batch_op.f('ix_customers_id'))
        batch_op.drop_index(batch_op.f('ix_customers_ad'))
    op.drop_table('customers')
