from clinicbook.models import Doctor, User

from conftest import create_doctor


def test_set_role_creates_doctor_account(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["set-role", "uid-doc", "doctor", "--full-name", "Dr. Who", "--years", "12"])
    assert result.exit_code == 0, result.output

    user = User.query.filter_by(external_uid="uid-doc").one()
    assert user.role == "doctor"
    assert user.full_name == "Dr. Who"
    doctor = Doctor.query.filter_by(user_id=user.id).one()
    assert doctor.years_experience == 12


def test_set_role_by_email_promotes_existing_account(app):
    doctor = create_doctor(uid="uid-existing")
    runner = app.test_cli_runner()
    result = runner.invoke(args=["set-role", "uid-existing@clinic.test", "admin"])
    assert result.exit_code == 0, result.output

    user = User.query.filter_by(external_uid="uid-existing").one()
    assert user.role == "admin"
    # profile is kept
    assert Doctor.query.filter_by(user_id=user.id).count() == 1
    assert doctor.user_id == user.id


def test_set_role_unknown_email(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["set-role", "ghost@example.test", "admin"])
    assert result.exit_code == 1
    assert "User not found" in result.output


def test_set_role_rejects_unknown_role(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["set-role", "uid-x", "superuser"])
    assert result.exit_code != 0
    assert User.query.count() == 0
