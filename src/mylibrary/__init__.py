"""MyLibrary: a personal book-tracking API.

Users register, authenticate with a bearer token and keep a private
collection of books with reading status, rating, notes and statistics.
"""

__version__ = "1.0.0"
