"""
Userbase API library for content negotiation of response bodies

Response bodies are JSON-encoded by default. Clients may ask for XML
using the ``Accept`` header. Requests whose ``Accept`` header matches
none of the supported media types are answered with `406` (Not
Acceptable) whenever the response would carry a body.
"""

import logging
import xml.etree.ElementTree as ElementTree
from typing import Any, Dict, List, NamedTuple, Optional

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .base import NotAcceptable


JSON_MEDIA_TYPE = "application/json"
XML_MEDIA_TYPE = "application/xml"

SUPPORTED_MEDIA_TYPES: Dict[str, str] = {
    "application/json": JSON_MEDIA_TYPE,
    "text/json": JSON_MEDIA_TYPE,
    "application/xml": XML_MEDIA_TYPE,
    "text/xml": XML_MEDIA_TYPE,
    "application/*": JSON_MEDIA_TYPE,
    "text/*": JSON_MEDIA_TYPE,
    "*/*": JSON_MEDIA_TYPE
}
"""
mapping of acceptable media ranges to the media type used to render the response
"""

logger = logging.getLogger(__name__)


class MediaRange(NamedTuple):
    media_range: str
    quality: float
    position: int

    @property
    def specificity(self) -> int:
        return 2 - self.media_range.count("*")


def parse_accept(header: Optional[str]) -> List[MediaRange]:
    """
    Parse the value of an ``Accept`` header into its media ranges, best first

    :param header: raw header value, may be empty or missing
    :return: list of media ranges ordered by quality, specificity and position
    """

    ranges = []
    for position, part in enumerate((header or "").split(",")):
        pieces = [piece.strip() for piece in part.split(";")]
        if not pieces[0]:
            continue
        quality = 1.0
        for parameter in pieces[1:]:
            key, _, value = parameter.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        ranges.append(MediaRange(pieces[0].lower(), quality, position))
    return sorted(ranges, key=lambda r: (-r.quality, -r.specificity, r.position))


def select_media_type(header: Optional[str]) -> Optional[str]:
    """
    Select the media type of the response body for the given ``Accept`` header

    :param header: raw header value, may be empty or missing
    :return: the selected media type or None if no supported media type is acceptable
    """

    ranges = parse_accept(header)
    if not ranges:
        return JSON_MEDIA_TYPE
    for media_range in ranges:
        if media_range.quality > 0 and media_range.media_range in SUPPORTED_MEDIA_TYPES:
            return SUPPORTED_MEDIA_TYPES[media_range.media_range]
    return None


def _fill_element(element: ElementTree.Element, content: Any, item_tag: str):
    if isinstance(content, dict):
        for key, value in content.items():
            _fill_element(ElementTree.SubElement(element, key), value, item_tag)
    elif isinstance(content, list):
        for value in content:
            _fill_element(ElementTree.SubElement(element, item_tag), value, item_tag)
    elif content is None:
        element.set("nil", "true")
    elif isinstance(content, bool):
        element.text = str(content).lower()
    else:
        element.text = str(content)


def to_xml(content: Any, root_tag: str, item_tag: str = "item") -> bytes:
    """
    Convert JSON-compatible content into an XML document

    Objects become elements with one child per member, arrays become
    repeated ``item_tag`` elements and null values are flagged with ``nil``.
    """

    root = ElementTree.Element(root_tag)
    _fill_element(root, content, item_tag)
    return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


def render(
        request: Request,
        content: Any,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        root_tag: str = "response",
        item_tag: str = "item",
        strict: bool = True
) -> Response:
    """
    Render the content using the media type preferred by the request

    :param request: incoming request carrying the ``Accept`` header
    :param content: pydantic model(s) or other JSON-compatible content
    :param status_code: status code of the response
    :param headers: optional extra headers of the response
    :param root_tag: name of the XML root element
    :param item_tag: name of XML elements of array items
    :param strict: switch to raise ``NotAcceptable`` instead of falling back to JSON
    :return: response carrying the encoded content
    :raises NotAcceptable: when strict and no supported media type is acceptable
    """

    accept = request.headers.get("Accept")
    media_type = select_media_type(accept)
    if media_type is None:
        if strict:
            raise NotAcceptable(accept)
        logger.debug(f"Falling back to JSON for unsupported Accept header {accept!r}")
        media_type = JSON_MEDIA_TYPE

    data = jsonable_encoder(content, by_alias=True)
    if media_type == XML_MEDIA_TYPE:
        return Response(
            to_xml(data, root_tag, item_tag),
            status_code=status_code,
            headers=headers,
            media_type=XML_MEDIA_TYPE
        )
    return JSONResponse(data, status_code=status_code, headers=headers)
