"""Important information broadcast service.

Administrators publish announcements that fan out to students, admins or an
explicit list of users; recipients track read/delete state and receive live
updates over websockets.
"""
