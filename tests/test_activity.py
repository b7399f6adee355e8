# tests/test_activity.py
import pytest
from conftest import API, section_body

from catalog_admin.extensions import db
from catalog_admin.models.activity_log import ActivityLog
from catalog_admin.utils.audit import record_activity


def test_record_activity_writes_row(app):
    record_activity(
        "homepage_section_updated",
        "homepage_section",
        "alpha",
        before={"title": "Old"},
        after={"title": "New"},
        actor_id="user-7",
    )

    log = ActivityLog.query.one()
    assert log.to_dict()["old_values"] == {"title": "Old"}
    assert log.new_values == {"title": "New"}
    assert log.actor_id == "user-7"


def test_activity_rows_are_immutable(app):
    record_activity("homepage_section_created", "homepage_section", "alpha", actor_id="user-1")
    log = ActivityLog.query.one()

    log.action = "tampered"
    with pytest.raises(RuntimeError):
        db.session.commit()
    db.session.rollback()


def test_sink_failure_does_not_fail_the_request(client, editor_headers, monkeypatch):
    def broken_commit():
        raise RuntimeError("activity table is gone")

    original_add = db.session.add

    def add(instance):
        original_add(instance)
        if isinstance(instance, ActivityLog):
            monkeypatch.setattr(db.session, "commit", broken_commit)

    monkeypatch.setattr(db.session, "add", add)

    response = client.post(
        f"{API}/homepage-sections",
        json=section_body("Alpha"),
        headers=editor_headers,
    )

    assert response.status_code == 201
    monkeypatch.undo()
    assert ActivityLog.query.count() == 0


def test_moves_record_before_and_after_order(create_section, client, editor_headers):
    create_section("Alpha")
    create_section("Bravo")

    client.post(
        f"{API}/homepage-sections/reorder",
        json={"moves": [{"id": "bravo", "position": 1}]},
        headers=editor_headers,
    )

    log = ActivityLog.query.filter_by(action="homepage_section_reordered").one()
    assert log.old_values == {"ordered_ids": ["alpha", "bravo"]}
    assert log.new_values == {"ordered_ids": ["bravo", "alpha"]}
