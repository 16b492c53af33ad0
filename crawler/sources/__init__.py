"""
Channel Crawler - Scrape Sources

- youtube: channel search pagination and /about page parsing
"""
