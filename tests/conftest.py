"""Shared fixtures: in-memory store, seeding helpers, SQLite-backed API client"""
import asyncio
import os
import uuid
from datetime import datetime, timedelta

# must be set before app modules build the engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.application.use_cases.approval_use_cases import ApprovalUseCases
from app.application.use_cases.assignment_use_cases import AssignmentUseCases
from app.application.use_cases.employee_use_cases import EmployeeUseCases
from app.application.use_cases.item_use_cases import ItemUseCases
from app.application.use_cases.resource_use_cases import ResourceUseCases
from app.domain.entities.employee import Employee
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.entities.resource import AllocationMode, Capacity, Resource
from app.infrastructure.database.base import build_engine, get_db, init_db
from app.infrastructure.repositories.unit_of_work_impl import InMemoryStore, InMemoryUnitOfWork


def run(coro):
    """Drive an async use case from a sync test"""
    return asyncio.run(coro)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def assignment_use_cases(uow_factory):
    return AssignmentUseCases(uow_factory)


@pytest.fixture
def approval_use_cases(uow_factory, assignment_use_cases):
    return ApprovalUseCases(uow_factory, assignment_use_cases)


@pytest.fixture
def resource_use_cases(uow_factory):
    return ResourceUseCases(uow_factory)


@pytest.fixture
def item_use_cases(uow_factory):
    return ItemUseCases(uow_factory)


@pytest.fixture
def employee_use_cases(uow_factory):
    return EmployeeUseCases(uow_factory)


# ---------------------------------------------------------------------------
# seeding helpers (write straight into the store)
# ---------------------------------------------------------------------------

def add_employee(store, name="Ada Lovelace", department="Engineering"):
    employee_id = str(uuid.uuid4())
    employee = Employee(
        id=employee_id,
        name=name,
        email=f"{name.lower().replace(' ', '.')}.{employee_id[:6]}@example.com",
        department=department,
    )
    store.employees[employee.id] = employee
    return employee


def add_resource(store, name="MacBook Pro", type="HARDWARE", mode=AllocationMode.EXCLUSIVE, capacity=None):
    resource = Resource(
        id=str(uuid.uuid4()),
        name=name,
        type=type,
        allocation_mode=mode,
        capacity=capacity or Capacity.bounded(1),
    )
    store.resources[resource.id] = resource
    return resource


def add_item(store, resource, serial_number=None, license_key=None, status=ItemStatus.AVAILABLE, age=0):
    created = datetime.utcnow() - timedelta(minutes=age)
    item = ResourceItem(
        id=str(uuid.uuid4()),
        resource_id=resource.id,
        status=status,
        serial_number=serial_number,
        license_key=license_key,
        created_at=created,
        updated_at=created,
    )
    store.items[item.id] = item
    return item


# ---------------------------------------------------------------------------
# SQLite-backed application
# ---------------------------------------------------------------------------

@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
