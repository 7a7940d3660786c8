"""
Storage discovery by hardcoded guesses.

Some providers never published discovery documents. For their users the
storage endpoint is guessed from the domain of the user address, using a
fixed table: IrisCouch, and the SURFnet storage used by Dutch universities.

This lookup shares no state with the scoped client.

Example:
    >>> info = guess_storage_info("alice@surfnet.nl")
    >>> info.href
    'https://storage.surfnetlabs.nl/saml/alice@surfnet.nl'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict

from .errors import DiscoveryError

STORAGE_REL = "https://www.w3.org/community/unhosted/wiki/personal-data-service-00"

_USER_RE = re.compile(r"^[.0-9A-Za-z]+$")
_HOST_RE = re.compile(r"^[.0-9A-Za-z\-]+$")


@dataclass(frozen=True)
class Blueprint:
    """How to build storage info for the users of one domain.

    Attributes:
        type: Storage API identifier
        auth_prefix: OAuth endpoint, the user address is appended
        href_prefix: Storage root
        path_format: "user@host" or "host/user", the part after href_prefix
    """

    type: str
    auth_prefix: str
    href_prefix: str
    path_format: str


@dataclass(frozen=True)
class StorageInfo:
    """Discovered storage endpoint of a user."""

    rel: str
    type: str
    href: str
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rel": self.rel,
            "type": self.type,
            "href": self.href,
            "properties": self.properties,
        }


IRISCOUCH = Blueprint(
    type="https://www.w3.org/community/unhosted/wiki/remotestorage-2011.10#couchdb",
    auth_prefix="http://proxy.unhosted.org/OAuth.html?userAddress=",
    href_prefix="http://proxy.unhosted.org/CouchDb",
    path_format="host/user",
)

SURFNET_SAML = Blueprint(
    type="https://www.w3.org/community/unhosted/wiki/remotestorage-2011.10#simple",
    auth_prefix="https://storage.surfnetlabs.nl/saml/oauth/authorize?user_address=",
    href_prefix="https://storage.surfnetlabs.nl/saml",
    path_format="user@host",
)

SURFNET_BROWSERID = Blueprint(
    type="https://www.w3.org/community/unhosted/wiki/remotestorage-2011.10#simple",
    auth_prefix="https://storage.surfnetlabs.nl/browserid/oauth/authorize?user_address=",
    href_prefix="https://storage.surfnetlabs.nl/browserid",
    path_format="user@host",
)

DUTCH_UNIVERSITIES_SAML = ("surfnet.nl", "fontys.nl")

DUTCH_UNIVERSITIES_BROWSERID = (
    "leidenuniv.nl", "leiden.edu", "uva.nl", "vu.nl", "eur.nl", "maastrichtuniversity.nl",
    "ru.nl", "rug.nl", "uu.nl", "tudelft.nl", "utwente.nl", "tue.nl", "tilburguniversity.edu",
    "uvt.nl", "wur.nl", "wageningenuniversity.nl", "ou.nl", "lumc.nl", "amc.nl",
    "ahk.nl", "cah.nl", "driestar.nl", "che.nl", "chn.nl", "hen.nl", "huygens.nl",
    "diedenoort.nl", "efa.nl", "dehaagsehogeschool.nl", "hasdenbosch.nl", "inholland.nl",
    "hsbrabant.nl", "dehorst.nl", "kempel.nl", "domstad.nl", "hsdrenthe.nl", "edith.nl",
    "hsleiden.nl", "interport.nl", "schumann.nl", "hsbos.nl", "hva.nl", "han.nl", "hvu.nl",
    "hesasd.nl", "hes-rdam.nl", "hku.nl", "hmtr.nl", "hzeeland.nl", "hotelschool.nl",
    "ichtus-rdam.nl", "larenstein.nl", "iselinge.nl", "koncon.nl", "kabk.nl", "lhump.nl",
    "msm.nl", "hsmarnix.nl", "nhtv.nl", "nth.nl", "nhl.nl", "sandberg.nl", "hsij.nl",
    "stoas.nl", "thrijswijk.nl", "tio.nl", "vhall.nl", "chw.nl", "hogeschoolrotterdam.nl",
)

GUESSES: Dict[str, Blueprint] = {"iriscouch.com": IRISCOUCH}
GUESSES.update({domain: SURFNET_SAML for domain in DUTCH_UNIVERSITIES_SAML})
GUESSES.update({domain: SURFNET_BROWSERID for domain in DUTCH_UNIVERSITIES_BROWSERID})


def _storage_info(blueprint: Blueprint, user_address: str, user: str, domain: str) -> StorageInfo:
    if blueprint.path_format == "user@host":
        tail = user_address
    else:
        tail = f"{domain}/{user}"
    return StorageInfo(
        rel=STORAGE_REL,
        type=blueprint.type,
        href=f"{blueprint.href_prefix}/{tail}",
        properties={
            "access-methods": ["http://oauth.net/core/1.0/parameters/auth-header"],
            "auth-methods": ["http://oauth.net/discovery/1.0/consumer-identity/static"],
            "auth-endpoint": blueprint.auth_prefix + user_address,
        },
    )


def guess_storage_info(user_address: str) -> StorageInfo:
    """Guess the storage endpoint of a user address.

    The host of the address and then each parent domain is looked up in
    the table, so "alice@cs.uva.nl" matches "uva.nl".

    Args:
        user_address: Address of the form user@host

    Returns:
        StorageInfo for the first matching domain

    Raises:
        DiscoveryError: If the address is malformed or no domain matches
    """
    parts = user_address.split("@")
    if len(parts) < 2:
        raise DiscoveryError(
            "That is not a user address. There is no @-sign in it", user_address
        )
    if len(parts) > 2:
        raise DiscoveryError(
            "That is not a user address. There is more than one @-sign in it", user_address
        )

    user, host = parts
    if not _USER_RE.match(user):
        raise DiscoveryError(
            "That is not a user address. There are non-dotalphanumeric symbols "
            f'before the @-sign: "{user}"',
            user_address,
        )
    if not _HOST_RE.match(host):
        raise DiscoveryError(
            "That is not a user address. There are non-dotalphanumeric symbols "
            f'after the @-sign: "{host}"',
            user_address,
        )

    domain = host
    while "." in domain:
        blueprint = GUESSES.get(domain)
        if blueprint is not None:
            return _storage_info(blueprint, user_address, user, domain)
        domain = domain.split(".", 1)[1]

    raise DiscoveryError("not a guessable domain, and fakefinger-migration has ended", user_address)
