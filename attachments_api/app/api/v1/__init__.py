"""
Version 1 of the API.

The ratings and the comments services each mount their own router from
this package (see ``router.py``).
"""
