"""Database fixtures for reitql tests (shared).

The dataset is small but covers every join the searches use:

- b1 is held by corp-a (two transactions) and corp-b (one transaction)
- b2 is held by corp-b and has a 2025 acquisition
- b3 is held by corp-b, was bought in a bulk deal and fully transferred later
- b4 is a retail asset that carries an office building id, held by delisted corp-c
"""

import pytest
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession

from reitql.models import (
    City,
    JReitAppraisal,
    JReitAppraisalHistory,
    JReitBuilding,
    JReitCapRateHistory,
    JReitCorporation,
    JReitDataHubIdMapping,
    JReitFinancial,
    JReitPressRelease,
    JReitTransaction,
    Prefecture,
    Station,
    TransactionCategoryValue,
    Ward,
    combined_transaction_id,
)

TOKYO_STATION_ID = 1
OSAKA_STATION_ID = 2


async def create_sample_geography(session: AsyncSession):
    """Prefectures, wards, cities and stations."""
    rows = [
        Prefecture(id=13, name="Tokyo"),
        Prefecture(id=27, name="Osaka"),
    ]
    session.add_all(rows)
    await session.flush()
    wards = [
        Ward(id=101, prefecture_id=13, name="Chiyoda"),
        Ward(id=102, prefecture_id=13, name="Minato"),
        Ward(id=201, prefecture_id=27, name="Kita"),
    ]
    session.add_all(wards)
    await session.flush()
    cities = [
        City(id=1001, ward_id=101, name="Marunouchi"),
        City(id=1002, ward_id=102, name="Shiba"),
        City(id=2001, ward_id=201, name="Umeda"),
    ]
    stations = [
        Station(id=TOKYO_STATION_ID, name="Tokyo", latitude=35.6812, longitude=139.7671),
        Station(id=OSAKA_STATION_ID, name="Osaka", latitude=34.7025, longitude=135.4959),
    ]
    session.add_all(cities + stations)
    await session.flush()
    await session.commit()
    return {'cities': cities, 'stations': stations}


@pytest.fixture(scope="function")
async def sample_geography(db_session: AsyncSession):
    return await create_sample_geography(db_session)


async def create_sample_corporations(session: AsyncSession):
    corporations = [
        JReitCorporation(id="corp-a", name="Alpha REIT", is_delisted=0),
        JReitCorporation(id="corp-b", name="Beta REIT", is_delisted=0),
        JReitCorporation(id="corp-c", name="Gamma REIT", is_delisted=1),
    ]
    session.add_all(corporations)
    await session.flush()
    await session.commit()
    return {c.id: c for c in corporations}


@pytest.fixture(scope="function")
async def sample_corporations(db_session: AsyncSession):
    return await create_sample_corporations(db_session)


def _building(id, name, city_id, latitude, longitude, **fields):
    flags = {
        'is_office': 0, 'is_retail': 0, 'is_hotel': 0, 'is_logistic': 0,
        'is_residential': 0, 'is_health_care': 0, 'is_other': 0,
    }
    flags.update({k: v for k, v in fields.items() if k in flags})
    rest = {k: v for k, v in fields.items() if k not in flags}
    return JReitBuilding(
        id=id, name=name, city_id=city_id, latitude=latitude, longitude=longitude, **flags, **rest
    )


async def create_sample_buildings(session: AsyncSession):
    buildings = [
        _building(
            "b1", "Marunouchi Tower", 1001, 35.6815, 139.7660,
            is_office=1, office_building_id=5001, completed_year=2001, completed_month=3,
            gross_floor_area=50000.0, land=3000.0, floor=30, basement=4, structure="SRC",
        ),
        _building(
            "b2", "Shiba Residence", 1002, 35.6560, 139.7540,
            is_residential=1, completed_year=2015, gross_floor_area=8000.0, land=1200.0,
        ),
        _building(
            "b3", "Umeda Logistics Center", 2001, 34.7050, 135.4980,
            is_logistic=1, gross_floor_area=120000.0, land=40000.0,
        ),
        _building(
            "b4", "Shiba Office Annex", 1002, 35.6570, 139.7550,
            is_retail=1, office_building_id=5002, completed_year=1990, gross_floor_area=4000.0,
        ),
    ]
    session.add_all(buildings)
    await session.flush()
    await session.commit()
    return {b.id: b for b in buildings}


@pytest.fixture(scope="function")
async def sample_buildings(db_session: AsyncSession, sample_geography):
    return await create_sample_buildings(db_session)


def _transaction(id, building_id, corporation_id, category, transaction_date, price, **fields):
    fields.setdefault('is_bulk', 0)
    return JReitTransaction(
        id=id,
        combined_transaction_id=combined_transaction_id(building_id, corporation_id),
        j_reit_building_id=building_id,
        j_reit_corporation_id=corporation_id,
        transaction_category=int(category),
        transaction_date=transaction_date,
        transaction_price=price,
        **fields,
    )


async def create_sample_transactions(session: AsyncSession):
    """Appraisals and transactions."""
    appraisals = [
        JReitAppraisal(id="ap1", appraisal_company="Tanaka Appraisal", appraisal_date=date(2020, 3, 1),
                       appraisal_price=12_000_000_000, cap_rate=3.5),
        JReitAppraisal(id="ap2", appraisal_company="Sato Appraisal", appraisal_date=date(2025, 2, 1),
                       appraisal_price=2_100_000_000, cap_rate=4.2),
        JReitAppraisal(id="ap3", appraisal_company="Tanaka Appraisal", appraisal_date=date(2019, 8, 1),
                       appraisal_price=9_000_000_000, cap_rate=4.8),
    ]
    session.add_all(appraisals)
    await session.flush()
    initial = TransactionCategoryValue.INITIAL_ACQUISITION
    transactions = [
        _transaction("t1", "b1", "corp-a", initial, date(2020, 4, 1), 11_000_000_000,
                     j_reit_appraisal_id="ap1", press_release_date=date(2020, 3, 15),
                     leasable_area=20000.0, total_leasable_area=20000.0),
        _transaction("t2", "b1", "corp-a", TransactionCategoryValue.ADDITIONAL_ACQUISITION, date(2023, 6, 1),
                     3_000_000_000, press_release_date=date(2023, 5, 20),
                     leasable_area=5000.0, total_leasable_area=25000.0),
        _transaction("t3", "b2", "corp-b", initial, date(2025, 3, 10), 2_000_000_000,
                     j_reit_appraisal_id="ap2", press_release_date=date(2025, 2, 28),
                     leasable_area=6000.0, total_leasable_area=6000.0),
        _transaction("t4", "b3", "corp-b", initial, date(2019, 9, 1), 30_000_000_000,
                     j_reit_appraisal_id="ap3", is_bulk=1, apportioned_transaction_price=8_000_000_000,
                     leasable_area=90000.0, total_leasable_area=90000.0),
        _transaction("t5", "b3", "corp-b", TransactionCategoryValue.FULL_TRANSFER, date(2024, 11, 30),
                     9_500_000_000, leasable_area=90000.0, total_leasable_area=0.0),
        _transaction("t6", "b4", "corp-c", initial, date(2018, 1, 15), 1_500_000_000,
                     leasable_area=4000.0, total_leasable_area=4000.0),
        _transaction("t7", "b1", "corp-b", initial, date(2021, 2, 1), 4_000_000_000,
                     leasable_area=10000.0, total_leasable_area=10000.0),
    ]
    session.add_all(transactions)
    await session.flush()
    await session.commit()
    return {t.id: t for t in transactions}


@pytest.fixture(scope="function")
async def sample_transactions(db_session: AsyncSession, sample_corporations, sample_buildings):
    return await create_sample_transactions(db_session)


async def create_sample_histories(session: AsyncSession):
    """Data-hub id mappings and the per-building series, inserted out of date order."""
    mappings = [
        JReitDataHubIdMapping(j_reit_building_id="b1", j_reit_corporation_id="corp-a", data_hub_building_id="dh-1"),
        JReitDataHubIdMapping(j_reit_building_id="b2", j_reit_corporation_id="corp-b", data_hub_building_id="dh-2"),
        JReitDataHubIdMapping(j_reit_building_id="b3", j_reit_corporation_id="corp-b", data_hub_building_id="dh-3"),
    ]
    cap_rates = [
        JReitCapRateHistory(data_hub_building_id="dh-1", closing_date=date(2023, 1, 1), cap_rate=3.4),
        JReitCapRateHistory(data_hub_building_id="dh-1", closing_date=date(2020, 1, 1), cap_rate=3.6),
        JReitCapRateHistory(data_hub_building_id="dh-1", closing_date=date(2021, 6, 30), cap_rate=3.5),
        JReitCapRateHistory(data_hub_building_id="dh-2", closing_date=date(2025, 3, 10), cap_rate=4.1),
    ]
    appraisal_histories = [
        JReitAppraisalHistory(data_hub_building_id="dh-1", appraisal_date=date(2023, 1, 1),
                              appraisal_price=12_500_000_000, cap_rate=3.4),
        JReitAppraisalHistory(data_hub_building_id="dh-1", appraisal_date=date(2020, 1, 1),
                              appraisal_price=11_500_000_000, cap_rate=3.6),
        JReitAppraisalHistory(data_hub_building_id="dh-2", appraisal_date=date(2025, 3, 31),
                              appraisal_price=2_200_000_000, cap_rate=4.1),
    ]
    financials = [
        JReitFinancial(data_hub_building_id="dh-1", fiscal_period_start_date=date(2022, 7, 1),
                       fiscal_period_end_date=date(2022, 12, 31), rent_revenue=400_000_000, occupancy_rate=97.5),
        JReitFinancial(data_hub_building_id="dh-1", fiscal_period_start_date=date(2023, 1, 1),
                       fiscal_period_end_date=date(2023, 6, 30), rent_revenue=410_000_000, occupancy_rate=98.0),
        JReitFinancial(data_hub_building_id="dh-1", fiscal_period_start_date=date(2022, 1, 1),
                       fiscal_period_end_date=date(2022, 6, 30), rent_revenue=390_000_000, occupancy_rate=96.0),
    ]
    press_releases = [
        JReitPressRelease(data_hub_building_id="dh-1", title="Additional acquisition of Marunouchi Tower",
                          release_date=date(2023, 5, 20)),
        JReitPressRelease(data_hub_building_id="dh-1", title="Acquisition of Marunouchi Tower",
                          url="https://example.com/pr/1", release_date=date(2020, 3, 15)),
    ]
    session.add_all(mappings + cap_rates + appraisal_histories + financials + press_releases)
    await session.flush()
    await session.commit()
    return {
        'mappings': mappings,
        'cap_rate_histories': cap_rates,
        'appraisal_histories': appraisal_histories,
        'financials': financials,
        'press_releases': press_releases,
    }


@pytest.fixture(scope="function")
async def sample_histories(db_session: AsyncSession):
    return await create_sample_histories(db_session)


@pytest.fixture(scope="function")
async def populated_db(sample_transactions, sample_histories, sample_corporations, sample_buildings):
    return {
        'corporations': sample_corporations,
        'buildings': sample_buildings,
        'transactions': sample_transactions,
        **sample_histories,
    }
