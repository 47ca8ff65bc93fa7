#
import msgs
import unittest

class basicTests(unittest.TestCase):
	def testResponses(self):
		"Test the three protocol answers."
		self.assertEqual(msgs.response(msgs.userid, "4000, 5000", "alice"),
				 "4000, 5000 : USERID : UNIX : alice\r\n")
		self.assertEqual(msgs.response(msgs.nouser, "4000, 5000"),
				 "4000, 5000 : ERROR : NO-USER\r\n")
		self.assertEqual(msgs.response(msgs.invalidport, "not-a-port, 80"),
				 "not-a-port, 80 : ERROR : INVALID-PORT\r\n")

	def testPercentInQuery(self):
		"Queries are data, not format strings."
		self.assertEqual(msgs.response(msgs.invalidport, "%(user)s, %d"),
				 "%(user)s, %d : ERROR : INVALID-PORT\r\n")

	def testClean(self):
		"Test that clean() defuses line breaks and NULs."
		self.assertEqual(msgs.clean("a\r\nb\0c"), "a\\r\\nb\\0c")
		self.assertEqual(msgs.clean("plain"), "plain")
		self.assertEqual(msgs.clean(b"by\xfftes"), "by\ufffdtes")

	def testFormat(self):
		"Test msgs.format() against some known values."
		peer = ('::ffff:127.0.0.1', 4000)
		self.assertEqual(msgs.format(msgs.logaccept, peer),
				 "connection from ::ffff:127.0.0.1 port 4000")
		self.assertEqual(msgs.format(msgs.loginvalid, peer,
					     query = "x\ny", error = "bad"),
				 "::ffff:127.0.0.1: 'x\\ny': bad")

if __name__ == "__main__":
	unittest.main()
