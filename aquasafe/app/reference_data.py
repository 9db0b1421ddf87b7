"""Static reference datasets: supply reservoirs and hazardous facilities.

Coordinates are approximate. Each tuple is read-only and is handed to
``HazardScanner`` at construction time.
"""

from __future__ import annotations

from .records import Facility, Reservoir

RESERVOIRS: tuple[Reservoir, ...] = (
    Reservoir("lake-mead", "Lake Mead (Colorado River)", 36.04, -114.74, "NV", ("NV", "AZ", "CA")),
    Reservoir("lake-powell", "Lake Powell", 36.94, -111.49, "AZ", ("AZ", "NV", "CA")),
    Reservoir("hoover", "Hoover Dam / Lake Mead intake", 36.02, -114.74, "NV", ("NV", "AZ", "CA")),
    Reservoir("nyc-delaware", "Delaware System (NYC)", 41.95, -75.0, "NY", ("NY",)),
    Reservoir("nyc-catskill", "Catskill System (NYC)", 42.1, -74.4, "NY", ("NY",)),
    Reservoir("croton", "Croton Watershed (NYC)", 41.25, -73.65, "NY", ("NY",)),
    Reservoir("patuxent", "Patuxent / Triadelphia (MD/DC)", 39.15, -76.95, "MD", ("MD", "DC")),
    Reservoir("occoquan", "Occoquan Reservoir (VA)", 38.68, -77.26, "VA", ("VA", "DC")),
    Reservoir("lake-lanier", "Lake Sidney Lanier", 34.18, -84.0, "GA", ("GA",)),
    Reservoir("allatoona", "Lake Allatoona", 34.15, -84.63, "GA", ("GA",)),
    Reservoir("norris", "Norris Lake (TN)", 36.22, -84.09, "TN", ("TN",)),
    Reservoir("douglas", "Douglas Lake (TN)", 36.0, -83.4, "TN", ("TN",)),
    Reservoir("toledo-bend", "Toledo Bend Reservoir", 31.2, -93.6, "LA", ("LA", "TX")),
    Reservoir("lake-travis", "Lake Travis (TX)", 30.42, -97.92, "TX", ("TX",)),
    Reservoir("lake-tawakoni", "Lake Tawakoni", 32.85, -95.95, "TX", ("TX",)),
    Reservoir("grand-lake-ok", "Grand Lake O' the Cherokees", 36.58, -94.85, "OK", ("OK",)),
    Reservoir("lake-ouachita", "Lake Ouachita", 34.65, -93.35, "AR", ("AR",)),
    Reservoir("lake-degray", "DeGray Lake", 34.18, -93.08, "AR", ("AR",)),
    Reservoir("lake-michigan-intake", "Lake Michigan intake (Chicago)", 41.88, -87.62, "IL", ("IL",)),
    Reservoir("ohio-river", "Ohio River (Cincinnati area)", 39.1, -84.5, "OH", ("OH", "KY", "IN")),
)

FACILITIES: tuple[Facility, ...] = (
    # Nuclear
    Facility("indian-point", "Indian Point (decommissioned)", 41.27, -73.95, "NY", "nuclear"),
    Facility("salem", "Salem / Hope Creek (NJ)", 39.47, -75.54, "NJ", "nuclear"),
    Facility("limerick", "Limerick (PA)", 40.23, -75.59, "PA", "nuclear"),
    Facility("three-mile", "Three Mile Island (PA)", 40.15, -76.72, "PA", "nuclear"),
    Facility("sequoyah", "Sequoyah (TN)", 35.22, -85.09, "TN", "nuclear"),
    Facility("watts-bar", "Watts Bar (TN)", 35.6, -84.79, "TN", "nuclear"),
    Facility("vogtle", "Vogtle (GA)", 33.14, -81.76, "GA", "nuclear"),
    Facility("comanche-peak", "Comanche Peak (TX)", 32.3, -97.79, "TX", "nuclear"),
    Facility("south-texas", "South Texas Project", 28.8, -96.05, "TX", "nuclear"),
    # Refineries
    Facility("bayway", "Bayway Refinery (NJ)", 40.64, -74.24, "NJ", "refinery"),
    Facility("philadelphia-ref", "Philadelphia Refinery (PA)", 39.83, -75.22, "PA", "refinery"),
    Facility("baton-rouge", "Baton Rouge Refinery (LA)", 30.45, -91.19, "LA", "refinery"),
    Facility("port-arthur", "Port Arthur Refinery (TX)", 29.9, -93.93, "TX", "refinery"),
    Facility("texas-city", "Texas City Refinery (TX)", 29.38, -94.9, "TX", "refinery"),
    # Power plants (coal/gas)
    Facility("indian-river", "Indian River Power Plant (DE)", 38.78, -75.21, "DE", "power_plant"),
    Facility("bowen", "Bowen (GA)", 34.12, -84.93, "GA", "power_plant"),
    Facility("paradise", "Paradise (KY)", 37.26, -86.98, "KY", "power_plant"),
    Facility("gibson", "Gibson (IN)", 38.37, -87.77, "IN", "power_plant"),
    Facility("martin-creek", "Martin Lake (TX)", 32.27, -94.57, "TX", "power_plant"),
)

# Reactor sites used for "in the event of a disaster" exposure summaries.
NUCLEAR_PLANTS: tuple[Facility, ...] = (
    Facility("n-palo-verde", "Palo Verde", 33.39, -112.87, "AZ", "nuclear"),
    Facility("n-browns-ferry", "Browns Ferry", 34.56, -87.1, "AL", "nuclear"),
    Facility("n-peach-bottom", "Peach Bottom", 39.76, -76.27, "PA", "nuclear"),
    Facility("n-susquehanna", "Susquehanna", 41.07, -76.0, "PA", "nuclear"),
    Facility("n-three-mile", "Three Mile Island", 40.15, -76.72, "PA", "nuclear"),
    Facility("n-indian-point", "Indian Point", 41.27, -73.95, "NY", "nuclear"),
    Facility("n-millstone", "Millstone", 41.31, -72.17, "CT", "nuclear"),
    Facility("n-pilgrim", "Pilgrim", 41.97, -70.58, "MA", "nuclear"),
    Facility("n-seabrook", "Seabrook", 42.9, -70.85, "NH", "nuclear"),
    Facility("n-vogtle", "Vogtle", 32.09, -81.78, "GA", "nuclear"),
    Facility("n-harris", "Shearon Harris", 35.63, -78.95, "NC", "nuclear"),
    Facility("n-mcguire", "McGuire", 35.43, -80.95, "NC", "nuclear"),
    Facility("n-catawba", "Catawba", 35.0, -81.07, "SC", "nuclear"),
    Facility("n-oconee", "Oconee", 34.8, -82.9, "SC", "nuclear"),
    Facility("n-summer", "V.C. Summer", 34.0, -81.0, "SC", "nuclear"),
    Facility("n-brunswick", "Brunswick", 33.96, -78.0, "NC", "nuclear"),
    Facility("n-south-texas", "South Texas", 28.8, -96.05, "TX", "nuclear"),
    Facility("n-comanche-peak", "Comanche Peak", 32.3, -97.78, "TX", "nuclear"),
    Facility("n-river-bend", "River Bend", 30.72, -91.24, "LA", "nuclear"),
    Facility("n-waterford", "Waterford", 29.99, -90.47, "LA", "nuclear"),
    Facility("n-grand-gulf", "Grand Gulf", 32.0, -91.05, "MS", "nuclear"),
    Facility("n-arkansas", "Arkansas Nuclear One", 35.31, -93.22, "AR", "nuclear"),
    Facility("n-cooper", "Cooper", 40.37, -95.63, "NE", "nuclear"),
    Facility("n-wolf-creek", "Wolf Creek", 38.24, -95.68, "KS", "nuclear"),
    Facility("n-callaway", "Callaway", 38.75, -91.78, "MO", "nuclear"),
    Facility("n-quad-cities", "Quad Cities", 41.72, -90.35, "IL", "nuclear"),
    Facility("n-byron", "Byron", 42.08, -89.28, "IL", "nuclear"),
    Facility("n-dresden", "Dresden", 41.45, -88.27, "IL", "nuclear"),
    Facility("n-braidwood", "Braidwood", 41.24, -88.22, "IL", "nuclear"),
    Facility("n-limerick", "Limerick", 40.23, -75.59, "PA", "nuclear"),
    Facility("n-beaver-valley", "Beaver Valley", 40.62, -80.43, "PA", "nuclear"),
    Facility("n-davis-besse", "Davis-Besse", 41.5, -82.87, "OH", "nuclear"),
    Facility("n-perry", "Perry", 41.8, -81.14, "OH", "nuclear"),
    Facility("n-fermi", "Fermi", 41.97, -83.26, "MI", "nuclear"),
    Facility("n-palisades", "Palisades", 42.31, -86.33, "MI", "nuclear"),
    Facility("n-cook", "Donald C. Cook", 41.97, -86.56, "MI", "nuclear"),
    Facility("n-point-beach", "Point Beach", 44.28, -87.54, "WI", "nuclear"),
    Facility("n-prairie-island", "Prairie Island", 44.63, -92.63, "MN", "nuclear"),
    Facility("n-monticello", "Monticello", 45.21, -93.82, "MN", "nuclear"),
    Facility("n-duane-arnold", "Duane Arnold", 41.92, -91.77, "IA", "nuclear"),
    Facility("n-clinton", "Clinton", 40.17, -88.84, "IL", "nuclear"),
    Facility("n-lasalle", "LaSalle", 41.25, -88.65, "IL", "nuclear"),
    Facility("n-zion", "Zion", 42.45, -87.8, "IL", "nuclear"),
    Facility("n-surry", "Surry", 37.17, -76.7, "VA", "nuclear"),
    Facility("n-north-anna", "North Anna", 38.06, -77.79, "VA", "nuclear"),
    Facility("n-calvert-cliffs", "Calvert Cliffs", 38.43, -76.44, "MD", "nuclear"),
    Facility("n-st-lucie", "St. Lucie", 27.34, -80.25, "FL", "nuclear"),
    Facility("n-turkey-point", "Turkey Point", 25.43, -80.33, "FL", "nuclear"),
    Facility("n-crystal-river", "Crystal River", 28.96, -82.72, "FL", "nuclear"),
    Facility("n-diablo-canyon", "Diablo Canyon", 35.21, -120.86, "CA", "nuclear"),
)

FACILITY_TYPE_LABELS = {
    "power_plant": "Power plant",
    "nuclear": "Nuclear facility",
    "refinery": "Refinery",
    "chemical": "Chemical facility",
}


def facility_type_label(facility_type: str) -> str:
    return FACILITY_TYPE_LABELS.get(facility_type, facility_type)
