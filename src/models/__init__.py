from .taxpayer import FilingStatus, TaxEntityType
from .schedule_d import ScheduleD, ScheduleDResult, calculate_schedule_d
from .form_461 import Form461, Form461Result, calculate_form_461
from .schedule_1 import Schedule1, Schedule1Result, calculate_schedule_1
from .form_172 import (
    Form172,
    Form172Part1Result,
    Form172Part2Input,
    Form172Part2Result,
    Form172Result,
    calculate_form_172,
)
from .form_1040 import Form1040, Form1040Result, calculate_form_1040
from .carryforward import (
    CarryforwardType,
    LossCarryforwardRecord,
    LossLimitationRecord,
    build_loss_limitation_record,
    ebl_carryforward_from,
)

__all__ = [
    'FilingStatus',
    'TaxEntityType',
    'ScheduleD',
    'ScheduleDResult',
    'calculate_schedule_d',
    'Form461',
    'Form461Result',
    'calculate_form_461',
    'Schedule1',
    'Schedule1Result',
    'calculate_schedule_1',
    'Form172',
    'Form172Part1Result',
    'Form172Part2Input',
    'Form172Part2Result',
    'Form172Result',
    'calculate_form_172',
    'Form1040',
    'Form1040Result',
    'calculate_form_1040',
    'CarryforwardType',
    'LossCarryforwardRecord',
    'LossLimitationRecord',
    'build_loss_limitation_record',
    'ebl_carryforward_from',
]
