"""
Parse train formation planning exports (XML) into plain record dictionaries
"""

from typing import Any, Dict, List, Optional
from xml.etree import ElementTree as ET
from core.exceptions import ParseError
import logging

logger = logging.getLogger(__name__)

FORMATION_RECORD = "TrainFormation"
TRIP_TAG = "Train"
SECTIONS_TAG = "TrainSections"
SECTION_TAG = "TrainSection"


def _local_name(tag: str) -> str:
    """Strip an XML namespace from a tag"""
    return tag.rsplit("}", 1)[-1]


def _attributes(element: ET.Element, mapping: Dict[str, str]) -> Dict[str, Any]:
    """Copy the mapped attributes that are present on the element"""
    return {
        key: element.get(attribute)
        for attribute, key in mapping.items()
        if element.get(attribute) is not None
    }


class FormationParser:
    """
    Turn export bytes into one dictionary per top-level record.

    Every direct child of the document root becomes a record tagged with
    its element name in "record_type". Train formations also carry their
    trips and formation sections; everything else is passed through with
    its attributes so the mapper can recognise and drop it.

    Expected layout:
        <TrainFormationPlanning>
          <TrainFormation trainNumber="101" startDate="2024-05-01">
            <Train trainNumber="101" startDate="2024-05-01" tripType="PassengerTrip" canceled="false">
              <TrainSections>
                <TrainSection division="STOG" position="1"/>
              </TrainSections>
            </Train>
          </TrainFormation>
        </TrainFormationPlanning>
    """

    FORMATION_ATTRIBUTES = {
        "trainNumber": "train_number",
        "startDate": "start_date",
    }

    TRIP_ATTRIBUTES = {
        "trainNumber": "train_number",
        "startDate": "start_date",
        "tripType": "trip_type",
        "canceled": "is_canceled",
        "origin": "origin",
        "destination": "destination",
        "departure": "departure",
        "arrival": "arrival",
    }

    SECTION_ATTRIBUTES = {
        "division": "division",
        "position": "position",
    }

    def parse(self, content: bytes, file_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Parse a planning export.

        Raises:
            ParseError: If the content is not well-formed XML
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            line, column = e.position
            raise ParseError(
                "Planning export is not well-formed XML",
                context={"file_name": file_name, "line_number": line, "column": column},
                original_exception=e
            )

        records = [self._parse_record(element) for element in root]

        logger.debug(f"Parsed {len(records)} records from {file_name or 'export'}")
        return records

    def _parse_record(self, element: ET.Element) -> Dict[str, Any]:
        record_type = _local_name(element.tag)

        if record_type != FORMATION_RECORD:
            return {"record_type": record_type, **dict(element.attrib)}

        record = {"record_type": record_type}
        record.update(_attributes(element, self.FORMATION_ATTRIBUTES))
        record["trips"] = [
            self._parse_trip(child)
            for child in element
            if _local_name(child.tag) == TRIP_TAG
        ]
        return record

    def _parse_trip(self, element: ET.Element) -> Dict[str, Any]:
        trip = _attributes(element, self.TRIP_ATTRIBUTES)

        # No wrapper means no formation data; an empty wrapper is an empty formation
        for child in element:
            if _local_name(child.tag) == SECTIONS_TAG:
                trip["sections"] = [
                    _attributes(section, self.SECTION_ATTRIBUTES)
                    for section in child
                    if _local_name(section.tag) == SECTION_TAG
                ]
                break

        return trip
