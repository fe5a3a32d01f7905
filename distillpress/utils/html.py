from bs4 import BeautifulSoup


def strip_html(html: str | None) -> str:
    """Plain text of an HTML fragment with script and style contents dropped."""
    if not html:
        return ''
    soup = BeautifulSoup(html, 'html.parser')
    for tag in soup(['script', 'style']):
        tag.decompose()
    return soup.get_text().strip()
