"""Unique slug issuance

SlugIssuer draws random slugs and checks them against the link data store,
retrying on collision a bounded number of times.

NOTE: the existence check and the later insert are not atomic. A concurrent
creator can take the same slug in between, which is why the data store's
insert (SET NX) is the real uniqueness guarantee. The pre-check only keeps
wasted insert attempts rare.
"""

import logging
from collections.abc import Callable

from shortlink.constants import Slug, LogEvent
from shortlink.exceptions import InvalidArgumentError, SlugExhaustedError
from shortlink.dao.base import LinkBaseDAO
from shortlink.utils.shortener import generate_slug


logger = logging.getLogger(__name__)


class SlugIssuer:
    """Issue slugs which are free at the time of the call

    Attributes:
        link_dao (LinkBaseDAO):
            Data store consulted for existing slugs.
        length (int):
            Default slug length. Defaults to 7.
        max_attempts (int):
            Candidates drawn before giving up. Defaults to 3.
        generator (Callable[[int], str]):
            Slug generator. Defaults to generate_slug.

    Example:
        >>> issuer = SlugIssuer(link_dao)
        >>> issuer.issue()
        'q3ZbT0x'
    """

    def __init__(
        self,
        link_dao: LinkBaseDAO,
        length: int = Slug.LENGTH,
        max_attempts: int = Slug.MAX_ATTEMPTS,
        generator: Callable[[int], str] = generate_slug,
    ):
        if max_attempts <= 0:
            raise InvalidArgumentError(f'max_attempts must be greater than 0 (given value: {max_attempts}).')

        self.link_dao = link_dao
        self.length = length
        self.max_attempts = max_attempts
        self.generator = generator

    def issue(self, length: int | None = None) -> str:
        """Draw a slug which doesn't exist in the data store

        Args:
            length (int | None):
                Slug length. Defaults to the issuer's length.

        Returns:
            str: a slug that was free when checked.

        Raises:
            InvalidArgumentError:
                If length is not a positive integer.
            SlugExhaustedError:
                If every candidate collided with an existing slug.
            DataStoreError:
                If the data store can't be reached.
        """
        length = self.length if length is None else length

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generator(length)
            if not self.link_dao.exists(candidate):
                return candidate

            logger.warning(
                'Slug collision, retrying.',
                extra={'slug': candidate, 'attempt': attempt, 'event': LogEvent.SLUG_COLLISION},
            )

        raise SlugExhaustedError(f'Failed to issue a unique slug of length {length} after {self.max_attempts} attempts.')
