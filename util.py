#
# Small parsing helpers for the configuration loader.

import ipaddress

def isipaddr(s):
	"""Is s a literal IPv4 or IPv6 address?"""
	try:
		ipaddress.ip_address(s)
	except ValueError:
		return False
	return True

def isport(s):
	return s.isascii() and s.isdigit() and int(s) <= 65535

def _wild(s):
	if s == '*':
		return ''
	return s

# Split a listen address of the form PORT@HOST into (host, port). Either
# half may be left out or given as '*'; a bare value is whichever of the
# two it looks like. Hosts are IP address literals of either family.
# Returns None on garbage.
def gethostport(s):
	if "@" not in s:
		if isipaddr(s):
			return (s, '')
		if isport(s):
			return ('', s)
		return None
	port, _, host = s.partition("@")
	port, host = _wild(port), _wild(host)
	if (port and not isport(port)) or (host and not isipaddr(host)):
		return None
	if not (host or port):
		return None
	return (host, port)

def int_or_raise(s, error):
	"""Convert s to an int, raising error with a message if we can't."""
	try:
		return int(s)
	except ValueError:
		raise error("not an integer: " + s)

# Durations are a count of seconds, minutes, hours or days: '30s', '5m'.
secsper = {'s': 1, 'm': 60, 'h': 60*60, 'd': 60*60*24}
def getsecs_or_raise(val, err):
	unit = val[-1:]
	if unit not in secsper:
		raise err("time duration does not end in s/m/h/d")
	try:
		num = int(val[:-1])
	except ValueError:
		raise err("not a number in time duration")
	return num * secsper[unit]
