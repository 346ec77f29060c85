from handbook_pdf.web_server.web_server import HandbookWebServer

__all__ = ["HandbookWebServer"]
