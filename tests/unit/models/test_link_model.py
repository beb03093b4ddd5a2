"""Unit tests for link records and views in link_model.py.

Test coverage includes:

1. Usability state machine
   - 1.1. Missing links are NOT_FOUND.
   - 1.2. Expiry is checked before the active flag.
   - 1.3. Suspended links are INACTIVE, everything else is USABLE.

2. LinkModel
   - 2.1. view() projects target, expiry and active flag.
   - 2.2. patched() only changes fields set on the patch.
   - 2.3. to_dict()/from_dict() use ISO 8601 timestamps.

3. Timestamp helpers
"""

from datetime import datetime, timedelta, UTC

import pytest
from freezegun import freeze_time

from shortlink.models import LinkModel, LinkView, LinkPatch, LinkState, link_state, to_iso, from_iso


NOW = datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def link() -> LinkModel:
    return LinkModel(
        id='6f1c2a8e-0b4d-4f7e-9a51-3c2d8e7f9b10',
        slug='abc123',
        target_url='https://example.com',
        created_at=NOW,
    )


# -------------------------------
# 1. Usability state machine
# -------------------------------


def test_link_state_not_found():
    assert link_state(None, NOW) == LinkState.NOT_FOUND


@pytest.mark.parametrize(
    'expires_at, is_active, expected',
    [
        (None, True, LinkState.USABLE),
        (NOW + timedelta(seconds=1), True, LinkState.USABLE),
        (NOW, True, LinkState.EXPIRED),  # expiry is inclusive
        (NOW - timedelta(days=1), True, LinkState.EXPIRED),
        (NOW - timedelta(days=1), False, LinkState.EXPIRED),  # expiry wins over the active flag
        (None, False, LinkState.INACTIVE),
        (NOW + timedelta(days=1), False, LinkState.INACTIVE),
    ],
)
def test_link_state(expires_at, is_active, expected):
    view = LinkView(target_url='https://example.com', expires_at=expires_at, is_active=is_active)
    assert link_state(view, NOW) == expected
    assert view.is_usable(NOW) is (expected == LinkState.USABLE)


@freeze_time('2025-10-15 12:00:00')
def test_link_state_defaults_to_current_time():
    view = LinkView(target_url='https://example.com', expires_at=datetime(2025, 10, 15, 11, 59, 59, tzinfo=UTC))
    assert link_state(view) == LinkState.EXPIRED


# -------------------------------
# 2.1. view()
# -------------------------------


def test_view(link: LinkModel):
    assert link.view() == LinkView(target_url='https://example.com', expires_at=None, is_active=True)


# -------------------------------
# 2.2. patched()
# -------------------------------


def test_patched_changes_only_set_fields(link: LinkModel):
    expires_at = NOW + timedelta(days=7)

    patched = link.patched(LinkPatch(expires_at=expires_at, is_active=False))

    assert patched.expires_at == expires_at
    assert patched.is_active is False
    assert patched.target_url == link.target_url
    assert patched.id == link.id
    assert patched.created_at == link.created_at
    assert link.is_active is True  # original untouched


def test_empty_patch(link: LinkModel):
    assert LinkPatch().is_empty()
    assert not LinkPatch(is_active=False).is_empty()
    assert link.patched(LinkPatch()) == link


# -------------------------------
# 2.3. Serialization
# -------------------------------


def test_to_dict(link: LinkModel):
    assert link.to_dict() == {
        'id': '6f1c2a8e-0b4d-4f7e-9a51-3c2d8e7f9b10',
        'slug': 'abc123',
        'target_url': 'https://example.com',
        'created_at': '2025-10-15T12:00:00+00:00',
        'expires_at': None,
        'is_active': True,
        'created_ip_hash': None,
    }


def test_from_dict_restores_link(link: LinkModel):
    assert LinkModel.from_dict(link.to_dict()) == link


def test_from_dict_defaults_optional_fields():
    link = LinkModel.from_dict(
        {
            'id': '1',
            'slug': 'abc123',
            'target_url': 'https://example.com',
            'created_at': '2025-10-15T12:00:00Z',
        }
    )
    assert link.expires_at is None
    assert link.is_active is True
    assert link.created_ip_hash is None


# -------------------------------
# 3. Timestamp helpers
# -------------------------------


def test_from_iso_treats_naive_timestamps_as_utc():
    assert from_iso('2025-10-15T12:00:00') == NOW


def test_iso_helpers_pass_none_through():
    assert to_iso(None) is None
    assert from_iso(None) is None
