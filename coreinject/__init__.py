import logging


logger = logging.getLogger(__name__)
sh = logging.StreamHandler()
sh.setFormatter(logging.Formatter('%(levelname)s   %(module)s.%(funcName)s :: %(message)s'))
logger.addHandler(sh)
logger.propagate = False

from .coreinject import CoreInjector, RegionLedger, ident_from_path
from .options import Override, OverrideRegistry, parse_data_option
from .phdrs import update_phdrs
from .symmap import SymbolMap, SymbolRecord
from . import constants, errors
