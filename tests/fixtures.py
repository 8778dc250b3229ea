"""Captured backend payloads, trimmed to the fields the normalizer reads."""

from __future__ import annotations

import copy

from routing.schemas import Coordinate

# Google's reference polyline (precision 5)
ORS_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
ORS_POLYLINE_COORDS = [
    [-120.2, 38.5],
    [-120.95, 40.7],
    [-126.453, 43.252],
]

# Valhalla-style shape (precision 6)
VALHALLA_SHAPE = "__c`|@~bl_xD_ibE~hbE"
VALHALLA_SHAPE_COORDS = [[-97.0, 32.0], [-97.1, 32.1]]

SF_WAYPOINTS = [
    Coordinate(latitude=37.7749, longitude=-122.4194),
    Coordinate(latitude=37.7849, longitude=-122.4084),
]

ORS_WAYPOINTS = [
    Coordinate(latitude=38.5, longitude=-120.2),
    Coordinate(latitude=43.252, longitude=-126.453),
]

VALHALLA_WAYPOINTS = [
    Coordinate(latitude=32.0, longitude=-97.0),
    Coordinate(latitude=32.1, longitude=-97.1),
]

_MAPBOX_DIRECTIONS = {
    "code": "Ok",
    "routes": [
        {
            "distance": 1672.4,
            "duration": 398.2,
            "weight": 412.0,
            "weight_name": "cyclability",
            "geometry": {
                "type": "LineString",
                "coordinates": [
                    [-122.4194, 37.7749],
                    [-122.4150, 37.7790],
                    [-122.4084, 37.7849],
                ],
            },
            "legs": [
                {
                    "distance": 1672.4,
                    "duration": 398.2,
                    "summary": "Market Street",
                    "steps": [
                        {
                            "distance": 900.0,
                            "duration": 210.0,
                            "name": "Market Street",
                            "mode": "cycling",
                            "geometry": {
                                "type": "LineString",
                                "coordinates": [
                                    [-122.4194, 37.7749],
                                    [-122.4150, 37.7790],
                                ],
                            },
                            "maneuver": {
                                "type": "depart",
                                "instruction": "Head northeast on Market Street",
                                "bearing_before": 0,
                                "bearing_after": 41,
                                "location": [-122.4194, 37.7749],
                            },
                        },
                        {
                            "distance": 772.4,
                            "duration": 188.2,
                            "name": "",
                            "mode": "cycling",
                            "geometry": {
                                "type": "LineString",
                                "coordinates": [
                                    [-122.4150, 37.7790],
                                    [-122.4084, 37.7849],
                                ],
                            },
                            "maneuver": {
                                "type": "arrive",
                                "instruction": "You have arrived",
                                "bearing_before": 360,
                                "bearing_after": 0,
                                "location": [-122.4084, 37.7849],
                                "modifier": "right",
                            },
                        },
                    ],
                },
            ],
        },
    ],
    "waypoints": [
        {"name": "Market Street", "location": [-122.4194, 37.7749], "distance": 3.2},
        {"name": "", "location": [-122.4084, 37.7849], "distance": 1.7},
    ],
}

_ORS_DIRECTIONS = {
    "routes": [
        {
            "summary": {"distance": 745000.0, "duration": 107000.0},
            "geometry": ORS_POLYLINE,
            "way_points": [0, 2],
            "segments": [
                {
                    "distance": 745000.0,
                    "duration": 107000.0,
                    "steps": [
                        {
                            "distance": 250000.0,
                            "duration": 36000.0,
                            "type": 11,
                            "instruction": "Head north on Main Street",
                            "name": "Main Street",
                            "way_points": [0, 1],
                        },
                        {
                            "distance": 495000.0,
                            "duration": 71000.0,
                            "type": 1,
                            "instruction": "Turn right",
                            "name": "-",
                            "way_points": [1, 2],
                        },
                        {
                            "distance": 0.0,
                            "duration": 0.0,
                            "type": 10,
                            "instruction": "Arrive at your destination",
                            "name": "-",
                            "way_points": [2, 2],
                        },
                    ],
                },
            ],
        },
    ],
}

_VALHALLA_ROUTE = {
    "trip": {
        "status": 0,
        "units": "kilometers",
        "summary": {"length": 14.9, "time": 3120.5},
        "legs": [
            {
                "summary": {"length": 14.9, "time": 3120.5},
                "shape": VALHALLA_SHAPE,
                "maneuvers": [
                    {
                        "type": 1,
                        "instruction": "Bike north on Elm Street.",
                        "street_names": ["Elm Street"],
                        "length": 14.9,
                        "time": 3120.5,
                        "travel_mode": "bicycle",
                        "begin_shape_index": 0,
                        "end_shape_index": 1,
                    },
                    {
                        "type": 4,
                        "instruction": "You have arrived at your destination.",
                        "length": 0.0,
                        "time": 0.0,
                        "travel_mode": "bicycle",
                        "begin_shape_index": 1,
                        "end_shape_index": 1,
                    },
                ],
            },
        ],
    },
}


def mapbox_directions() -> dict:
    return copy.deepcopy(_MAPBOX_DIRECTIONS)


def ors_directions() -> dict:
    return copy.deepcopy(_ORS_DIRECTIONS)


def valhalla_route() -> dict:
    return copy.deepcopy(_VALHALLA_ROUTE)
