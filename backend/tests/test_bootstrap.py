"""
Startup bootstrap and CLI commands.
"""

import logging

import pytest
from sqlalchemy import inspect, text

from pharmapos import create_app
from pharmapos.extensions import db
from pharmapos.models import Role, RolePermission, Setting, User
from pharmapos.permissions import DEFAULT_ROLE_PERMISSIONS, Module
from pharmapos.services import permission_service
from pharmapos.services.bootstrap_service import (
    add_missing_columns,
    bootstrap_database,
    fix_legacy_role_names,
    seed_superadmin,
)


DEFAULT_CELLS = sum(
    len(actions) for modules in DEFAULT_ROLE_PERMISSIONS.values() for actions in modules.values()
)


class TestBootstrap:

    def test_first_run_seeds_everything(self, db_session):
        summary = bootstrap_database()

        assert summary == {
            "columns_added": [],
            "legacy_fixes": 0,
            "roles_created": 2,
            "permissions_created": DEFAULT_CELLS,
            "superadmin_created": True,
            "settings_created": 2,
        }
        assert {r.name for r in db_session.query(Role).all()} == {"Admin", "Cashier"}
        assert db_session.query(User).filter_by(role="superadmin").count() == 1
        assert {s.key: s.value for s in db_session.query(Setting).all()} == {"ppn_rate": "0", "discount_rate": "0"}

    def test_second_run_changes_nothing(self, db_session):
        bootstrap_database()
        users = db_session.query(User).count()
        cells = db_session.query(RolePermission).count()

        summary = bootstrap_database()

        assert summary == {
            "columns_added": [],
            "legacy_fixes": 0,
            "roles_created": 0,
            "permissions_created": 0,
            "superadmin_created": False,
            "settings_created": 0,
        }
        assert db_session.query(User).count() == users
        assert db_session.query(RolePermission).count() == cells

    def test_matrix_edits_survive_a_rerun(self, db_session):
        bootstrap_database()
        cashier = db_session.query(Role).filter_by(name="Cashier").one()
        permission_service.set_permission(cashier.id, Module.PRODUCTS, "show", False)

        bootstrap_database()

        assert permission_service.has_permission("Cashier", Module.PRODUCTS, "show") is False
        assert permission_service.has_permission("Cashier", Module.TRANSACTIONS, "create") is True

    def test_seeded_superadmin_can_log_in(self, client, db_session):
        bootstrap_database()

        resp = client.post("/api/login", json={"username": "superadmin", "password": "password123"})

        assert resp.status_code == 200
        assert resp.json["user"]["role"] == "superadmin"

    def test_default_superadmin_password_is_flagged(self, db_session, caplog):
        with caplog.at_level(logging.WARNING):
            assert seed_superadmin() is True

        assert "default password" in caplog.text

    def test_configured_superadmin_password(self, app, client, db_session, caplog, monkeypatch):
        monkeypatch.setitem(app.config, "SUPERADMIN_PASSWORD", "Apotek-Sehat-2026")

        with caplog.at_level(logging.WARNING):
            assert seed_superadmin() is True

        assert "default password" not in caplog.text
        resp = client.post("/api/login", json={"username": "superadmin", "password": "Apotek-Sehat-2026"})
        assert resp.status_code == 200

    def test_superadmin_not_reseeded_when_one_exists(self, db_session, make_user):
        make_user("owner", "superadmin")

        bootstrap_database()

        assert [u.username for u in db_session.query(User).filter_by(role="superadmin")] == ["owner"]

    def test_legacy_role_name_is_fixed(self, db_session, make_user):
        db_session.add(Role(name="Casier"))
        db_session.commit()
        make_user("kasir_lama", "Casier")

        fixed = fix_legacy_role_names()

        assert fixed == 2
        assert db_session.query(Role).filter_by(name="Casier").first() is None
        assert db_session.query(Role).filter_by(name="Cashier").one()
        assert db_session.query(User).filter_by(username="kasir_lama").one().role == "Cashier"
        assert fix_legacy_role_names() == 0


@pytest.fixture
def legacy_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'legacy.sqlite3'}",
        'BOOTSTRAP_ON_STARTUP': False,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET_KEY': 'test-jwt-secret-key-long-enough-for-hs256-signing',
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.engine.dispose()


class TestMissingColumns:

    def test_adds_and_backfills_columns(self, legacy_app):
        with db.engine.begin() as conn:
            conn.execute(text(
                "CREATE TABLE outlets (id INTEGER PRIMARY KEY, name VARCHAR(255) NOT NULL, location VARCHAR(255))"
            ))
            conn.execute(text("INSERT INTO outlets (name, location) VALUES ('Apotek Lama', 'Jl. Lama 1')"))

        added = add_missing_columns()

        assert "outlets.status" in added
        assert "outlets.created_at" in added
        columns = {c["name"] for c in inspect(db.engine).get_columns("outlets")}
        assert {"status", "created_at"} <= columns
        with db.engine.connect() as conn:
            assert conn.execute(text("SELECT status FROM outlets")).scalar() == "Active"

        assert add_missing_columns() == []


class TestCli:

    def test_system_init(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "init"])

        assert result.exit_code == 0, result.output
        assert "Superadmin account created" in result.output
        assert db_session.query(Role).count() == 2

    def test_users_create_and_list(self, app, roles, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "users", "create", "--username", "kasir1", "--password", "Rahasia123", "--role", "Cashier",
        ])
        assert result.exit_code == 0, result.output

        result = runner.invoke(args=["users", "list"])
        assert "kasir1" in result.output

        result = runner.invoke(args=[
            "users", "create", "--username", "kasir2", "--password", "Rahasia123", "--role", "Pharmacist",
        ])
        assert result.exit_code != 0
        assert "Unknown role" in result.output

    def test_users_create_rejects_weak_password(self, app, roles, db_session):
        result = app.test_cli_runner().invoke(args=[
            "users", "create", "--username", "kasir3", "--password", "short", "--role", "Cashier",
        ])
        assert result.exit_code != 0
        assert db_session.query(User).filter_by(username="kasir3").first() is None

    def test_perms_grant_and_revoke(self, app, roles, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["perms", "grant", "Cashier", "Transactions", "create"])
        assert result.exit_code == 0, result.output
        assert permission_service.has_permission("Cashier", Module.TRANSACTIONS, "create") is True

        result = runner.invoke(args=["perms", "revoke", "Cashier", "Transactions", "create"])
        assert result.exit_code == 0, result.output
        assert permission_service.has_permission("Cashier", Module.TRANSACTIONS, "create") is False

        result = runner.invoke(args=["perms", "list", "Cashier"])
        assert "Transactions" in result.output

    def test_perms_unknown_module(self, app, roles):
        result = app.test_cli_runner().invoke(args=["perms", "grant", "Cashier", "Payroll", "create"])
        assert result.exit_code != 0
