"""Test Tracker: record past papers and the marks achieved on them."""
