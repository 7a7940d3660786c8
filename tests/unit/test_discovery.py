"""
Unit tests for storage discovery by hardcoded guesses.
"""

import re

import pytest

from sdk.remotestorage_sdk.discovery import (
    IRISCOUCH,
    STORAGE_REL,
    SURFNET_BROWSERID,
    SURFNET_SAML,
    guess_storage_info,
)
from sdk.remotestorage_sdk.errors import DiscoveryError


class TestAddressValidation:
    """Malformed user addresses are rejected with a reason."""

    @pytest.mark.parametrize(
        "address,reason",
        [
            ("alice", "no @-sign"),
            ("a@b@c.nl", "more than one @-sign"),
            ("al+ice@surfnet.nl", 'before the @-sign: "al+ice"'),
            ("alice@surf_net.nl", 'after the @-sign: "surf_net.nl"'),
        ],
    )
    def test_rejected(self, address, reason):
        with pytest.raises(DiscoveryError, match=re.escape(reason)) as exc_info:
            guess_storage_info(address)

        assert exc_info.value.code == "DISCOVERY_ERROR"
        assert exc_info.value.user_address == address


class TestGuessStorageInfo:
    """Tests for guess_storage_info."""

    def test_surfnet_saml(self):
        info = guess_storage_info("alice@surfnet.nl")

        assert info.rel == STORAGE_REL
        assert info.type == SURFNET_SAML.type
        assert info.href == "https://storage.surfnetlabs.nl/saml/alice@surfnet.nl"
        assert info.properties["auth-endpoint"] == (
            "https://storage.surfnetlabs.nl/saml/oauth/authorize?user_address=alice@surfnet.nl"
        )

    def test_parent_domain_matches(self):
        """Subdomains fall back to the first listed parent domain."""
        info = guess_storage_info("alice@cs.uva.nl")

        assert info.type == SURFNET_BROWSERID.type
        assert info.href == "https://storage.surfnetlabs.nl/browserid/alice@cs.uva.nl"

    def test_iriscouch_uses_host_user_path(self):
        info = guess_storage_info("bob@iriscouch.com")

        assert info.type == IRISCOUCH.type
        assert info.href == "http://proxy.unhosted.org/CouchDb/iriscouch.com/bob"
        assert info.properties["auth-endpoint"] == (
            "http://proxy.unhosted.org/OAuth.html?userAddress=bob@iriscouch.com"
        )

    def test_to_dict(self):
        data = guess_storage_info("alice@fontys.nl").to_dict()

        assert set(data) == {"rel", "type", "href", "properties"}
        assert data["properties"]["access-methods"] == [
            "http://oauth.net/core/1.0/parameters/auth-header"
        ]

    @pytest.mark.parametrize("address", ["bob@example.com", "bob@localhost", "bob@nl"])
    def test_unguessable(self, address):
        with pytest.raises(DiscoveryError, match="not a guessable domain"):
            guess_storage_info(address)
