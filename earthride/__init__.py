"""Save Earth Ride content API: Google Sheets as the datastore for blog posts,
drives and admin records, plus the running-banner presentation state."""

__version__ = "0.1.0"
