import pytest

from Collapser import config

SAMPLE_TEXT = """\
Analysis of sampling MyApp (pid 1234) every 1 millisecond
Process:         MyApp [1234]
Path:            /Applications/MyApp.app/Contents/MacOS/MyApp

Call graph:
    5130 Thread_8749954
    + 5130 start  (in libdyld.dylib) + 1  [0x7fff6b0c03d5]
    +   4282 main  (in MyApp) + 100  [0x10000a000]
    +   ! 4000 compute  (in MyApp) + 20  [0x10000a100]
    +   ! 282 __psynch_cvwait  (in libsystem_kernel.dylib) + 10  [0x7fff6b1f4a16]
    +   848 -[NSApplication run]  (in AppKit) + 764  [0x7fff3c6b5b1c]
    2000 Thread_8749955
    + 2000 start_wqthread  (in libsystem_pthread.dylib) + 13  [0x7fff6b2b1b69]
    +   2000 compute  (in MyApp) + 20  [0x10000a100]

Total number in stack (recursive counted multiple, when >=5):
        5       compute  (in MyApp) + 20  [0x10000a100]

Sort by top of stack, same collapsed (when >= 5):
        compute  (in MyApp)        6000
"""

SAMPLE_FOLDED = """\
Thread_8749954;libdyld`start;AppKit`-[NSApplication run] 848
Thread_8749954;libdyld`start;MyApp`main;MyApp`compute 4000
Thread_8749955;libsystem_pthread`start_wqthread;MyApp`compute 2000
"""

SAMPLE_FOLDED_NO_MODULES = """\
Thread_8749954;start;-[NSApplication run] 848
Thread_8749954;start;main;compute 4000
Thread_8749955;start_wqthread;compute 2000
"""


@pytest.fixture
def sample_text():
    return SAMPLE_TEXT


@pytest.fixture
def fresh_config():
    config.reset_config()
    yield
    config.reset_config()
