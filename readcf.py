#
# The generic skeleton for reading configuration files: skip blank and
# comment lines, hand each real line to a parse function, and raise
# errors that carry the file name and line number.
#
# This is tested through cfloader, its only user.

def readcf(fp, fname, parseFunc, errObj):
	lineno = 0
	while True:
		try:
			line = fp.readline()
		except OSError as e:
			raise errObj("IO error reading %s: %s" % (fname, e))
		if line == "":
			return
		lineno += 1
		line = line.strip()
		if line == "" or line.startswith("#"):
			continue
		try:
			parseFunc(line, lineno)
		except errObj as e:
			raise errObj("error parsing %s line %d: %s" % \
				     (fname, lineno, e))
