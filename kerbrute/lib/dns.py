import logging

import dns.exception
import dns.resolver

LOG = logging.getLogger('kerbrute.dns')

def get_kdc_srv_records(realm, protocols=('tcp', 'udp'), nameserver=None, dns_tcp=True, timeout=3):
	"""
	Look up the KDCs of a realm through its _kerberos SRV records.

	Records are ordered by priority, then by descending weight. The first
	protocol that yields an answer wins.

	Args:
		realm (str): Kerberos realm, used verbatim in the query name
		protocols (tuple): SRV protocol labels to try, in order
		nameserver (str): query this server instead of the host's resolver
		dns_tcp (bool): query over TCP
		timeout (int): resolver lifetime in seconds

	Returns:
		list: "host:port" strings, empty when nothing was found
	"""
	if nameserver:
		LOG.debug(f"Querying KDCs for {realm} from DNS server {nameserver}")
		dnsresolver = dns.resolver.Resolver(configure=False)
		dnsresolver.nameservers = [nameserver]
	else:
		LOG.debug(f"Using host's resolver to find KDCs for {realm}")
		dnsresolver = dns.resolver.Resolver()
	dnsresolver.lifetime = float(timeout)

	for proto in protocols:
		query = f'_kerberos._{proto}.{realm}'
		try:
			answer = dnsresolver.resolve(query, 'SRV', tcp=dns_tcp)
		except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer, dns.resolver.NoNameservers, dns.exception.Timeout) as e:
			LOG.debug(f"SRV lookup for {query} failed: {e}")
			continue

		records = sorted(answer, key=lambda r: (r.priority, -r.weight))
		kdcs = []
		for r in records:
			target = str(r.target).rstrip('.')
			if not target:
				continue
			kdcs.append(f"{target}:{r.port}")
			LOG.debug(f"Found KDC {target}:{r.port} (priority {r.priority}, weight {r.weight})")
		if kdcs:
			return kdcs

	return []
