__title__ = "minihttp"
__description__ = "A minimal async HTTP/1.1 client for single GET and POST requests."
__version__ = "0.1.0"
