# Overview: Pytest coverage for the Flask CLI bootstrap commands.

from gasflow.models import CylinderType, User


class TestSystemCommands:

    def test_init_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()

        first = runner.invoke(args=["system", "init"])
        assert first.exit_code == 0, first.output
        assert "Cylinder catalog seeded (12 new types)" in first.output
        assert "Created admin" in first.output

        second = runner.invoke(args=["system", "init"])
        assert second.exit_code == 0, second.output
        assert "(0 new types)" in second.output
        assert "already exists" in second.output

        assert db_session.query(CylinderType).count() == 12
        assert db_session.query(User).filter_by(email=app.config["ADMIN_EMAIL"]).count() == 1

    def test_create_user_rejects_weak_password(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Gupta Gas",
            "--email", "gupta@example.com",
            "--password", "weak",
        ])
        assert result.exit_code != 0
        assert "Password must be at least 8 characters long" in result.output
        assert db_session.query(User).count() == 0
