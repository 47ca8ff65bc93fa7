#
# Message services: the response lines we send to clients and the
# standard messages we log about sessions.

# RFC 1413 responses. The query is echoed back exactly as it arrived.
EOL = "\r\n"
userid = "%(query)s : USERID : UNIX : %(user)s"
invalidport = "%(query)s : ERROR : INVALID-PORT"
nouser = "%(query)s : ERROR : NO-USER"

def response(fmt, query, user = None):
	return (fmt % {'query': query, 'user': user}) + EOL

# Clean up client-supplied text before it goes near a log line. We do
# not want clients forging log lines or putting NULs in syslog.
def clean(s):
	if isinstance(s, bytes):
		s = s.decode("utf-8", "replace")
	for c, r in (("\0", "\\0"), ("\r", "\\r"), ("\n", "\\n")):
		if c in s:
			s = r.join(s.split(c))
	return s

def format(msg, peer, **kwargs):
	"""Format a log message for a session with peer (ip, port).

	Keyword arguments are stirred in after being cleaned."""
	d = {'ip': peer[0], 'port': peer[1]}
	for k, v in kwargs.items():
		d[k] = clean(str(v))
	return msg % d

# Standard log messages.
logaccept = "connection from %(ip)s port %(port)s"
loganswer = "%(ip)s: '%(query)s' -> %(answer)s"
lognoquery = "%(ip)s: no query: %(error)s"
loginvalid = "%(ip)s: '%(query)s': %(error)s"
loglookup = "%(ip)s: '%(query)s' unanswered: %(error)s"
logsockerr = "%(ip)s: session aborted in state %(state)s: %(error)s"
logfault = "%(ip)s: session failed in state %(state)s: %(error)s"
