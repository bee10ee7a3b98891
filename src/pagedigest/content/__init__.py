"""HTML to Markdown content pipeline."""

from pagedigest.content.processor import process_html_content

__all__ = ["process_html_content"]
