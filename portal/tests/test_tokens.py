from datetime import timedelta

import pytest
from django.utils import timezone

from portal import tokens
from portal.roles import Role


def test_issue_then_verify():
    token = tokens.issue('abc-123', Role.DOCTOR)
    cred = tokens.verify(token)
    assert cred is not None
    assert cred.subject_id == 'abc-123'
    assert cred.role is Role.DOCTOR
    assert cred.expires_at - cred.issued_at == timedelta(seconds=1800)


def test_legacy_role_spelling_is_normalised():
    cred = tokens.verify(tokens.issue('u', 'part'))
    assert cred.role is Role.PARTICIPANT


def test_unknown_role_is_refused():
    with pytest.raises(ValueError):
        tokens.issue('u', 'root')


def test_expired_token_is_rejected():
    token = tokens.issue('u', Role.STAFF, issued_at=timezone.now() - timedelta(minutes=31))
    assert tokens.verify(token) is None


def test_token_still_valid_just_before_expiry():
    token = tokens.issue('u', Role.STAFF, issued_at=timezone.now() - timedelta(minutes=29))
    assert tokens.verify(token) is not None


def test_tampered_token_is_rejected():
    header, payload, signature = tokens.issue('u', Role.PARTICIPANT).split('.')
    flipped = ('B' if signature[0] == 'A' else 'A') + signature[1:]
    assert tokens.verify('.'.join([header, payload, flipped])) is None


def test_tampered_payload_is_rejected():
    header, payload, signature = tokens.issue('u', Role.PARTICIPANT).split('.')
    # first character of the base64 payload; still decodes, no longer matches the signature
    flipped = ('f' if payload[0] == 'e' else 'e') + payload[1:]
    assert tokens.verify('.'.join([header, flipped, signature])) is None


@pytest.mark.parametrize('garbage', [None, '', 'not-a-jwt', 'a.b.c'])
def test_garbage_is_rejected(garbage):
    assert tokens.verify(garbage) is None



def test_reissue_keeps_subject_and_role():
    old = tokens.Credential('u', Role.STAFF, timezone.now() - timedelta(minutes=20),
                            timezone.now() + timedelta(minutes=10))
    new = tokens.verify(tokens.reissue(old))
    assert new.subject_id == 'u'
    assert new.role is Role.STAFF
    assert new.expires_at > old.expires_at
