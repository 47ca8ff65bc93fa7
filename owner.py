#
# Find the owner of a connection in lsof -F output.
#
# With '-F Ln', lsof writes one field per line, each line starting with
# a single tag character. An 'L' line names the login that owns the
# process; every 'n' line after it (up to the next 'L') describes one
# of that process's connections, as 'LOCALIP:LPORT->REMOTEIP:RPORT'.
# lsof also emits 'p' and 'f' lines that we have no use for.
#
# We match on text, not on numbers: the connection we want is the first
# 'n' line containing ':LPORT->'. We never try to parse ports back out
# of lsof's output.

LOGIN = "L"
NAME = "n"

def records(output):
	"""Yield (owner, name) for each 'n' line of lsof -F output.

	owner is the most recent 'L' value, or None if no 'L' line has
	been seen yet."""
	if isinstance(output, bytes):
		output = output.decode("utf-8", "replace")
	cur = None
	# Only \n ends a field; anything else is part of its value.
	for line in output.split("\n"):
		if line.endswith("\r"):
			line = line[:-1]
		if not line:
			continue
		tag = line[0]
		if tag == LOGIN:
			cur = line[1:].strip()
		elif tag == NAME:
			yield (cur, line[1:])

def find(local_port, output):
	"""Return the login owning the connection from local_port, or None."""
	target = ":%d->" % (local_port,)
	for user, name in records(output):
		if target in name:
			# First match wins, even if no login preceded it.
			return user
	return None
