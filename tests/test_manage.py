import uuid

import pytest

from studysync import manage
from studysync.models.db_models import Role, User


@pytest.mark.asyncio
async def test_promote_admin_updates_existing_user(fake_db, capsys):
    user = User(id=uuid.uuid4(), full_name="Ada Lovelace", email="ada@example.com", password_hash="x")
    await fake_db.add_user(user)

    exit_code = await manage.promote_admin(fake_db, "  ADA@example.com ")

    assert exit_code == 0
    assert (await fake_db.get_user_by_id(user.id)).role == Role.ADMIN
    assert "is now an admin" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_promote_admin_unknown_email(fake_db, capsys):
    exit_code = await manage.promote_admin(fake_db, "ghost@example.com")

    assert exit_code == 1
    assert "No user registered" in capsys.readouterr().err


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        manage.build_parser().parse_args([])


def test_parser_reads_promote_email():
    args = manage.build_parser().parse_args(["promote-admin", "ada@example.com"])

    assert (args.command, args.email) == ("promote-admin", "ada@example.com")


def test_main_without_database_url(capsys):
    assert manage.main(["init-db"]) == 2
    assert "DATABASE_URL" in capsys.readouterr().err
