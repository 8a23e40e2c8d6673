"""SQLAlchemy models for the J-REIT dataset."""

import enum

from sqlalchemy import Column, Integer, String, Float, Date, BigInteger, ForeignKey, Index
from sqlalchemy.orm import DeclarativeBase


class TransactionCategoryValue(enum.IntEnum):
    INITIAL_ACQUISITION = 0
    ADDITIONAL_ACQUISITION = 1
    PARTIAL_TRANSFER = 2
    FULL_TRANSFER = 3


def combined_transaction_id(building_id: str, corporation_id: str) -> str:
    return f"{building_id}-{corporation_id}"


class Base(DeclarativeBase):
    """Base class for reitql models."""


class Prefecture(Base):
    __tablename__ = 'prefectures'

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)


class Ward(Base):
    __tablename__ = 'wards'

    id = Column(Integer, primary_key=True)
    prefecture_id = Column(Integer, ForeignKey('prefectures.id'), nullable=False)
    name = Column(String(100), nullable=False)


class City(Base):
    __tablename__ = 'cities'

    id = Column(Integer, primary_key=True)
    ward_id = Column(Integer, ForeignKey('wards.id'), nullable=False)
    name = Column(String(100), nullable=False)


class Station(Base):
    __tablename__ = 'stations'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)


class JReitCorporation(Base):
    __tablename__ = 'j_reit_corporations'

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    is_delisted = Column(Integer, nullable=False, default=0)


class JReitBuilding(Base):
    __tablename__ = 'j_reit_buildings'

    id = Column(String(64), primary_key=True)
    office_building_id = Column(BigInteger, nullable=True, index=True)
    residential_building_id = Column(BigInteger, nullable=True)
    city_id = Column(Integer, ForeignKey('cities.id'), nullable=True)
    # building spec
    name = Column(String(200), nullable=False)
    address = Column(String(300), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    nearest_station = Column(String(100), nullable=True)
    completed_year = Column(Integer, nullable=True)
    completed_month = Column(Integer, nullable=True)
    gross_floor_area = Column(Float, nullable=True)
    basement = Column(Integer, nullable=True)
    floor = Column(Integer, nullable=True)
    structure = Column(String(50), nullable=True)
    floor_plan = Column(String(100), nullable=True)
    # land spec
    land = Column(Float, nullable=True)
    building_coverage_ratio = Column(Float, nullable=True)
    floor_area_ratio = Column(Float, nullable=True)
    # asset type flags (0/1)
    is_office = Column(Integer, nullable=False, default=0)
    is_retail = Column(Integer, nullable=False, default=0)
    is_hotel = Column(Integer, nullable=False, default=0)
    is_logistic = Column(Integer, nullable=False, default=0)
    is_residential = Column(Integer, nullable=False, default=0)
    is_health_care = Column(Integer, nullable=False, default=0)
    is_other = Column(Integer, nullable=False, default=0)


class JReitAppraisal(Base):
    __tablename__ = 'j_reit_appraisals'

    id = Column(String(64), primary_key=True)
    appraisal_company = Column(String(200), nullable=True)
    appraisal_date = Column(Date, nullable=True)
    appraisal_price = Column(BigInteger, nullable=True)
    cap_rate = Column(Float, nullable=True)
    final_cap_rate = Column(Float, nullable=True)
    discount_rate = Column(Float, nullable=True)
    noi = Column(BigInteger, nullable=True)


class JReitTransaction(Base):
    __tablename__ = 'j_reit_transactions'
    __table_args__ = (
        Index('ix_j_reit_transactions_pair', 'j_reit_building_id', 'j_reit_corporation_id'),
    )

    id = Column(String(64), primary_key=True)
    combined_transaction_id = Column(String(140), nullable=False, index=True)
    j_reit_building_id = Column(String(64), ForeignKey('j_reit_buildings.id'), nullable=False)
    j_reit_corporation_id = Column(String(64), ForeignKey('j_reit_corporations.id'), nullable=False)
    j_reit_appraisal_id = Column(String(64), ForeignKey('j_reit_appraisals.id'), nullable=True)
    transaction_date = Column(Date, nullable=True)
    transaction_category = Column(Integer, nullable=False)
    transaction_price = Column(BigInteger, nullable=True)
    apportioned_transaction_price = Column(BigInteger, nullable=True)
    is_bulk = Column(Integer, nullable=False, default=0)
    transaction_partner = Column(String(200), nullable=True)
    leasable_area = Column(Float, nullable=True)
    total_leasable_area = Column(Float, nullable=True)
    leasable_units = Column(Integer, nullable=True)
    land_ownership_type = Column(String(50), nullable=True)
    land_ownership_ratio = Column(Float, nullable=True)
    building_ownership_type = Column(String(50), nullable=True)
    building_ownership_ratio = Column(Float, nullable=True)
    property_manager = Column(String(200), nullable=True)
    pml_assessment_company = Column(String(200), nullable=True)
    trustee = Column(String(200), nullable=True)
    press_release_date = Column(Date, nullable=True)


class JReitDataHubIdMapping(Base):
    __tablename__ = 'j_reit_data_hub_id_mappings'

    id = Column(Integer, primary_key=True, autoincrement=True)
    j_reit_building_id = Column(String(64), nullable=False, index=True)
    j_reit_corporation_id = Column(String(64), nullable=False)
    data_hub_building_id = Column(String(64), nullable=False, index=True)


class JReitAppraisalHistory(Base):
    __tablename__ = 'j_reit_appraisal_histories'

    id = Column(Integer, primary_key=True, autoincrement=True)
    data_hub_building_id = Column(String(64), nullable=False, index=True)
    appraisal_date = Column(Date, nullable=False)
    appraisal_price = Column(BigInteger, nullable=True)
    cap_rate = Column(Float, nullable=True)
    appraisal_company = Column(String(200), nullable=True)


class JReitCapRateHistory(Base):
    __tablename__ = 'j_reit_cap_rate_histories'

    id = Column(Integer, primary_key=True, autoincrement=True)
    data_hub_building_id = Column(String(64), nullable=False, index=True)
    closing_date = Column(Date, nullable=False)
    cap_rate = Column(Float, nullable=True)


class JReitFinancial(Base):
    __tablename__ = 'j_reit_financials'

    id = Column(Integer, primary_key=True, autoincrement=True)
    data_hub_building_id = Column(String(64), nullable=False, index=True)
    fiscal_period_start_date = Column(Date, nullable=False)
    fiscal_period_end_date = Column(Date, nullable=False)
    rent_revenue = Column(BigInteger, nullable=True)
    noi = Column(BigInteger, nullable=True)
    occupancy_rate = Column(Float, nullable=True)


class JReitPressRelease(Base):
    __tablename__ = 'j_reit_press_releases'

    id = Column(Integer, primary_key=True, autoincrement=True)
    data_hub_building_id = Column(String(64), nullable=False, index=True)
    title = Column(String(300), nullable=False)
    url = Column(String(500), nullable=True)
    release_date = Column(Date, nullable=False)
