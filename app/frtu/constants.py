"""
Central constants for the FRTU tracker.
"""
from __future__ import annotations

# Record store blob keys
STORAGE_KEY_DEVICES = "pea_frtu_data"
STORAGE_KEY_LOGS = "pea_frtu_logs"
STORAGE_KEY_DIRECTORY = "pea_frtu_employees"

# Sample devices written on first read of an empty store
INITIAL_DEVICES = (
    {
        "id": "1",
        "serialNumber": "FRTU-PEA-001",
        "substation": "สถานีไฟฟ้าเชียงใหม่ 1",
        "feeder": "F01",
        "location": "หน้า รร. ยุพราช",
        "ipAddress": "192.168.1.101",
        "status": "Online",
        "commandCode": "CMD-001",
        "eventDetails": "ตรวจสอบประจำปี แบตเตอรี่ปกติ",
        "phosData": "-",
        "phboData": "-",
        "lastMaintenance": "2023-10-20",
        "technician": "นายสมชาย ใจดี",
    },
    {
        "id": "2",
        "serialNumber": "FRTU-PEA-002",
        "substation": "สถานีไฟฟ้าเชียงใหม่ 1",
        "feeder": "F02",
        "location": "แยกภูคำ",
        "ipAddress": "192.168.1.102",
        "status": "Offline",
        "commandCode": "CMD-002",
        "eventDetails": "รอเปลี่ยนอุปกรณ์สื่อสาร",
        "phosData": "แจ้งซ่อมแล้ว",
        "phboData": "-",
        "lastMaintenance": "2023-11-05",
        "technician": "นายวิชัย รักงาน",
    },
    {
        "id": "3",
        "serialNumber": "FRTU-PEA-003",
        "substation": "สถานีไฟฟ้าแม่ริม",
        "feeder": "F05",
        "location": "หน้า อบต. ดอนแก้ว",
        "ipAddress": "192.168.2.15",
        "status": "Initializing",
        "commandCode": "CMD-003",
        "eventDetails": "กำลังปรับปรุงเฟิร์มแวร์",
        "phosData": "-",
        "phboData": "รออนุมัติ",
        "lastMaintenance": "2024-05-20",
        "technician": "นายสมศักดิ์ ช่างไฟ",
    },
)

# Fallback technician directory
INITIAL_DIRECTORY = (
    "นายสมชาย ใจดี",
    "นายวิชัย รักงาน",
    "นายสมศักดิ์ ช่างไฟ",
    "นางสาวมานี มีใจ",
    "นายชูใจ ใฝ่ดี",
)

# Spreadsheet column headers for mirrored log rows, in sheet order
LOG_SHEET_COLUMNS = (
    "Timestamp",
    "Officer",
    "Remote Unit Name",
    "Action",
    "System Details",
    "Event Details",
    "PHOS Data",
    "PHBO Data",
    "Status",
)

# Header labels that can appear inside the scanned directory range
DIRECTORY_HEADER_LABELS = frozenset({"ชื่อ-สกุล", "ชื่อ", "Name"})

EXPORT_COLUMNS = ("Date", "Officer", "Serial", "Action", "Details", "PHOS Data", "PHBO Data")
