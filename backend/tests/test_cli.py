"""CLI bootstrap commands."""

from laundry_api.models import Laundry, User, UserRole


class TestUserCommands:

    def test_create_super_admin(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create",
            "--email", "Root@Laundry.local",
            "--name", "Root",
            "--role", "SUPER_ADMIN",
            "--password", "secret123",
        ])
        assert result.exit_code == 0, result.output
        assert "PASS Created user root@laundry.local" in result.output

        user = db_session.query(User).filter_by(email="root@laundry.local").one()
        assert user.role == UserRole.SUPER_ADMIN

    def test_duplicate_email_fails(self, app, customer):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create", "--email", customer.email, "--name", "Dup", "--password", "secret123",
        ])
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_list_filters_by_role(self, app, customer, admin_a):
        result = app.test_cli_runner().invoke(args=["users", "list", "--role", "ADMIN"])
        assert result.exit_code == 0
        assert admin_a.email in result.output
        assert customer.email not in result.output


class TestLaundryCommands:

    def test_create_laundry_for_admin(self, app, db_session, unbound_admin):
        result = app.test_cli_runner().invoke(args=[
            "laundries", "create",
            "--name", "Fresh Folds",
            "--email", "hello@freshfolds.test",
            "--phone", "0611111111",
            "--admin-email", unbound_admin.email,
        ])
        assert result.exit_code == 0, result.output

        laundry = db_session.query(Laundry).filter_by(name="Fresh Folds").one()
        assert laundry.admin_id == unbound_admin.id

    def test_refuses_non_admin_owner(self, app, customer):
        result = app.test_cli_runner().invoke(args=[
            "laundries", "create",
            "--name", "Nope",
            "--email", "nope@nope.test",
            "--phone", "0",
            "--admin-email", customer.email,
        ])
        assert result.exit_code != 0
        assert "not ADMIN" in result.output

    def test_refuses_admin_with_laundry(self, app, admin_a, laundry_a):
        result = app.test_cli_runner().invoke(args=[
            "laundries", "create",
            "--name", "Second",
            "--email", "second@laundry.test",
            "--phone", "0",
            "--admin-email", admin_a.email,
        ])
        assert result.exit_code != 0
