from Collapser.common_types import FoldedStack, Options
from Collapser.occurrences import Occurrences
from Collapser.parser_core import SampleFolder, line_parts
