"""
Fixed-size zip records written by the raw copier (APPNOTE.TXT 4.3).

Only the subset zipsplit writes is declared here. Sizes of these structs are
the constants of the size model.
"""

import struct

LOCAL_HEADER_SIGNATURE = 0x04034B50
DATA_DESCRIPTOR_SIGNATURE = 0x08074B50
CENTRAL_DIR_SIGNATURE = 0x02014B50
END_OF_CENTRAL_DIR_SIGNATURE = 0x06054B50

# APPNOTE.TXT 4.3.7
LOCAL_HEADER = struct.Struct("<LHHHHHLLLHH")
# APPNOTE.TXT 4.3.9, with the optional signature
DATA_DESCRIPTOR = struct.Struct("<LLLL")
# APPNOTE.TXT 4.3.12
CENTRAL_DIR_RECORD = struct.Struct("<LHHHHHHLLLHHHHHLL")
# APPNOTE.TXT 4.3.16
END_OF_CENTRAL_DIR = struct.Struct("<LHHHHLLH")

# offset of "file name length" inside a local header
LOCAL_NAME_LENGTH_OFFSET = 26

FLAG_DATA_DESCRIPTOR = 0x0008
FLAG_UTF8 = 0x0800

ZIP32_LIMIT = 0xFFFFFFFF
ZIP32_ENTRY_LIMIT = 0xFFFF
