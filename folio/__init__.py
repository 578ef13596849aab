"""
Folio: a server-rendered portfolio and blog with an admin console.

Content, admin sign-in and uploaded images live in Firebase (Firestore,
Firebase Auth, Cloud Storage). Every backend sits behind a small protocol
with an in-memory implementation so the site runs locally and in tests
without credentials.
"""
