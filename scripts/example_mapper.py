"""
Example mapper for import_sketches.py.

Assigns every feature to one sketch class, groups features into folders
by their REGION field and skips features without a NAME.
"""

SKETCH_CLASS_ID = "5c1a0e5e2d9b4a0012345678"
FOLDER_CLASS_ID = "5c1a0e5e2d9b4a0012345679"


def map_feature(geometry, properties):
    if not properties.get("NAME"):
        return None

    properties["SKETCH_CLASS_ID"] = SKETCH_CLASS_ID
    region = properties.pop("REGION", None)
    if region:
        properties["FOLDER"] = {"name": region, "type": FOLDER_CLASS_ID}
    return properties
