#
# Parse an ident query line, '<port-on-server> , <port-on-client>',
# into a (local port, remote port) pair. Whitespace around either
# number is ignored.

import identerr

MAXPORT = 65535

def _port(field):
	# int() is too forgiving for us: it takes signs, underscores and
	# non-ASCII digits. We want plain decimal.
	if not field or not field.isascii() or not field.isdigit():
		raise identerr.InvalidPort("bad port %r" % (field,))
	v = int(field)
	if v > MAXPORT:
		raise identerr.InvalidPort("port out of range: %s" % (field,))
	return v

def parse(raw):
	"""Return (local_port, remote_port) from a query line.

	Raises identerr.InvalidPort if the line is not exactly two
	comma-separated unsigned 16-bit port numbers."""
	fields = [x.strip() for x in raw.split(",")]
	if len(fields) != 2:
		raise identerr.InvalidPort("expected 2 fields, got %d" % \
					   (len(fields),))
	return (_port(fields[0]), _port(fields[1]))
