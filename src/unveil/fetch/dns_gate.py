"""Host resolution through explicitly configured DNS servers."""

import ipaddress

import dns.exception
import dns.resolver
import structlog

from unveil.fetch.models import FetchError, FetchErrorClass


logger = structlog.get_logger()

_DNS_LIFETIME_SECONDS = 5.0


class DnsGate:
    """Checks that a host resolves through the configured name servers.

    Upstream sites sometimes answer differently through ISP resolvers, so
    a host must resolve through the configured servers before any request
    is sent to it. When no servers are configured the gate is open.
    """

    def __init__(
        self,
        nameservers: list[str],
        lifetime: float = _DNS_LIFETIME_SECONDS,
        resolver: dns.resolver.Resolver | None = None,
    ) -> None:
        """Initialize the gate.

        Args:
            nameservers: Name server IP addresses, in order of preference.
            lifetime: Total time budget for one resolution.
            resolver: Pre-built resolver (for testing).
        """
        self._nameservers = list(nameservers)
        self._log = logger.bind(component="dns")
        if resolver is not None:
            self._resolver: dns.resolver.Resolver | None = resolver
        elif self._nameservers:
            self._resolver = dns.resolver.Resolver(configure=False)
            self._resolver.nameservers = self._nameservers
            self._resolver.lifetime = lifetime
        else:
            self._resolver = None

    @property
    def enabled(self) -> bool:
        """Whether resolution is checked at all."""
        return self._resolver is not None

    def check(self, host: str) -> FetchError | None:
        """Resolve a host.

        Args:
            host: Host name from the request URL.

        Returns:
            None when the host resolves (or needs no resolution), otherwise
            a DNS failure.
        """
        if self._resolver is None or not host or _is_ip_literal(host):
            return None

        try:
            answer = self._resolver.resolve(host, "A")
        except dns.resolver.NoAnswer:
            return self._check_ipv6(self._resolver, host)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoNameservers) as e:
            return self._failure(host, f"DNS resolution failed for {host}: {e}")
        except dns.exception.Timeout:
            return self._failure(host, f"DNS resolution timed out for {host}")

        self._log.debug("dns_resolved", host=host, addresses=len(answer))
        return None

    def _check_ipv6(
        self, resolver: dns.resolver.Resolver, host: str
    ) -> FetchError | None:
        try:
            resolver.resolve(host, "AAAA")
        except dns.exception.DNSException as e:
            return self._failure(host, f"DNS resolution failed for {host}: {e}")
        return None

    def _failure(self, host: str, message: str) -> FetchError:
        self._log.info("dns_failed", host=host, nameservers=self._nameservers)
        return FetchError(error_class=FetchErrorClass.DNS, message=message)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True
