#
# The client side is mostly tested against our own server in
# test_identd; here we check answer parsing and the no-answer cases.
import socket
import threading
import unittest

import idclient

class useridTests(unittest.TestCase):
	knownValues = (
		("4000, 5000 : USERID : UNIX : alice", "alice"),
		("4000,5000:USERID:UNIX:bob", "bob"),
		("4000, 5000 : USERID : OTHER , US-ASCII : carol", "carol"),
		("4000, 5000 : USERID : UNIX : weird:name", "weird:name"),
		("4000, 5000 : ERROR : NO-USER", None),
		("4000, 5000 : ERROR : INVALID-PORT", None),
		("garbage", None),
		("", None),
		(None, None),
		)
	def testUserid(self):
		"Test idclient.userid() on known answers."
		for a, res in self.knownValues:
			self.assertEqual(idclient.userid(a), res, "bad result for %r" % (a,))

# A one-shot server that sends a canned reply and hangs up.
def oneshot(reply):
	s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
	s.bind(('127.0.0.1', 0))
	s.listen(1)
	def serve():
		c, addr = s.accept()
		c.recv(1024)
		c.sendall(reply)
		c.close()
		s.close()
	threading.Thread(target = serve, daemon = True).start()
	return s.getsockname()[1]

class requestTests(unittest.TestCase):
	def testAnswer(self):
		port = oneshot(b"1, 2 : ERROR : NO-USER\r\nextra\r\n")
		self.assertEqual(idclient.request('127.0.0.1', "1, 2", 5, port),
				 "1, 2 : ERROR : NO-USER")

	def testBareLF(self):
		port = oneshot(b"1, 2 : USERID : UNIX : dave\n")
		self.assertEqual(idclient.ident('127.0.0.1', 1, '127.0.0.1', 2,
						5, port), "dave")

	def testNoLine(self):
		"An answer without a line ending is no answer."
		port = oneshot(b"1, 2 : USERID : UNIX : dave")
		self.assertEqual(idclient.request('127.0.0.1', "1, 2", 5, port),
				 None)

	def testNoServer(self):
		"Test that nobody listening gives None."
		s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		s.bind(('127.0.0.1', 0))
		port = s.getsockname()[1]
		s.close()
		self.assertEqual(idclient.request('127.0.0.1', "1, 2", 5, port),
				 None)

if __name__ == "__main__":
	unittest.main()
