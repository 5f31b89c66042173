from themeweave.model.stylesheet import (
    Property,
    Rule,
    Selector,
    Statement,
    Stylesheet,
    VariableDeclaration,
)
from themeweave.model.values import (
    Color,
    Distance,
    Image,
    ImageScale,
    Keyword,
    Orientation,
    Rect,
    ResolutionContext,
    ResolvedRect,
    Text,
    Unit,
    Value,
    ValueList,
    VariableRef,
)

__all__ = [
    "Color",
    "Distance",
    "Image",
    "ImageScale",
    "Keyword",
    "Orientation",
    "Property",
    "Rect",
    "ResolutionContext",
    "ResolvedRect",
    "Rule",
    "Selector",
    "Statement",
    "Stylesheet",
    "Text",
    "Unit",
    "Value",
    "ValueList",
    "VariableDeclaration",
    "VariableRef",
]
