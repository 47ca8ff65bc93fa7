#
# The errors a session can run into. Each exception carries a kind,
# which is what session handling dispatches on; the text is only for
# the logs.
#
# Not finding a user is not an error. The owner lookup just returns
# None and the session answers NO-USER.

import enum

class Kind(enum.Enum):
	NOQUERY = 1
	INVALIDPORT = 2
	LOOKUP = 3

descriptions = {
	Kind.NOQUERY: "no query received from client",
	Kind.INVALIDPORT: "invalid port specification in query",
	Kind.LOOKUP: "connection lookup failed",
	}

class IdentError(Exception):
	kind = None
	def __init__(self, detail = None):
		Exception.__init__(self, detail)
		self.detail = detail
	def __str__(self):
		if self.detail:
			return "%s: %s" % (descriptions[self.kind], self.detail)
		return descriptions[self.kind]

# The client closed on us, sent an overlong line, or sent garbage.
class NoQuery(IdentError):
	kind = Kind.NOQUERY
# The query did not come down to two port numbers.
class InvalidPort(IdentError):
	kind = Kind.INVALIDPORT
# lsof (or whatever stands in for it) could not give us an answer.
# This is our problem, not the client's.
class LookupFailed(IdentError):
	kind = Kind.LOOKUP
