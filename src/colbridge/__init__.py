from .config import BridgeConfig as BridgeConfig
from .host import HostContext as HostContext
from .codec import HostCodec as HostCodec
from .codec import to_host as to_host
from .codec import from_host as from_host

# Data types
from .datatypes import DataType as DataType
from .datatypes import Field as Field
from .datatypes import Schema as Schema
from .datatypes import TimeUnit as TimeUnit
from .datatypes import CategoricalOrdering as CategoricalOrdering
from .datatypes import UnknownKind as UnknownKind
from .datatypes import RevMapping as RevMapping
from .datatypes import Int8 as Int8
from .datatypes import Int16 as Int16
from .datatypes import Int32 as Int32
from .datatypes import Int64 as Int64
from .datatypes import UInt8 as UInt8
from .datatypes import UInt16 as UInt16
from .datatypes import UInt32 as UInt32
from .datatypes import UInt64 as UInt64
from .datatypes import Float32 as Float32
from .datatypes import Float64 as Float64
from .datatypes import Boolean as Boolean
from .datatypes import String as String
from .datatypes import Binary as Binary
from .datatypes import BinaryOffset as BinaryOffset
from .datatypes import Null as Null
from .datatypes import Date as Date
from .datatypes import Time as Time
from .datatypes import Datetime as Datetime
from .datatypes import Duration as Duration
from .datatypes import Decimal as Decimal
from .datatypes import List as List
from .datatypes import Array as Array
from .datatypes import Struct as Struct
from .datatypes import Categorical as Categorical
from .datatypes import Enum as Enum
from .datatypes import Object as Object
from .datatypes import Unknown as Unknown

# Codecs
from .dtype_codec import DataTypeCodec as DataTypeCodec
from .series import Series as Series
from .series import SeriesCodec as SeriesCodec
from .table import Table as Table
from .table import TableCodec as TableCodec

# Chunk transfer
from .ffi import ExportedChunk as ExportedChunk
from .ffi import TransferState as TransferState
from .ffi import exported as exported

# Deferred plans
from .plan import LazyPlan as LazyPlan
from .plan import Expression as Expression
from .plan import PlanSerializer as PlanSerializer
from .plan import LazyFrameCodec as LazyFrameCodec
from .plan import ExprCodec as ExprCodec
from .plan import col as col
from .plan import lit as lit

# Errors
from .errors import BridgeError as BridgeError
from .errors import UnsupportedTypeError as UnsupportedTypeError
from .errors import InvalidParameterError as InvalidParameterError
from .errors import ConversionError as ConversionError
from .errors import ShapeError as ShapeError
from .errors import PlanDeserializeError as PlanDeserializeError
from .errors import InternalTypeError as InternalTypeError
from .errors import OwnershipError as OwnershipError
