"""
Shared constants for the Go documentation lookup server.
"""

# Server identity
SERVER_NAME = "GoDoc"
CONFIG_RESOURCE = "config://go-doc"

# Output formatting
DEFAULT_LINE_LENGTH = 80
UNDOCUMENTED = "Undocumented."
TEXT_INDENT = ""
PRE_INDENT = "    "
CONSTANT_VALUE_PREFIX = "Constant Value: "

# Import path handling
VENDOR_SEGMENT = "/vendor/"
BUILTIN_IMPORT_PATH = "builtin"
UNKNOWN_PACKAGE_PATH = "command-line-arguments"

# Go source files
GO_EXTENSION = ".go"
TEST_SUFFIX = "_test.go"
GO_MOD_FILE = "go.mod"
BUILTIN_FILE = "builtin.go"

# Environment variables
ENV_GOROOT = "GOROOT"
ENV_GOPATH = "GOPATH"
ENV_GOMODCACHE = "GOMODCACHE"
ENV_GOOS = "GOOS"
ENV_GOARCH = "GOARCH"
ENV_BUILD_TAGS = "GO_DOC_TAGS"
ENV_BUILTIN_SOURCE = "GO_DOC_BUILTIN_SOURCE"

# Placeholders appended when unexported members are elided
UNEXPORTED_FIELDS_COMMENT = "// Has unexported fields."
UNEXPORTED_METHODS_COMMENT = "// Has unexported methods."

# Known GOOS / GOARCH values used to interpret file name suffixes
KNOWN_OS = frozenset([
    'aix', 'android', 'darwin', 'dragonfly', 'freebsd', 'hurd', 'illumos',
    'ios', 'js', 'linux', 'nacl', 'netbsd', 'openbsd', 'plan9', 'solaris',
    'wasip1', 'windows', 'zos',
])

KNOWN_ARCH = frozenset([
    '386', 'amd64', 'amd64p32', 'arm', 'armbe', 'arm64', 'arm64be', 'loong64',
    'mips', 'mipsle', 'mips64', 'mips64le', 'mips64p32', 'mips64p32le',
    'ppc', 'ppc64', 'ppc64le', 'riscv', 'riscv64', 's390', 's390x', 'sparc',
    'sparc64', 'wasm',
])

UNIX_OS = frozenset([
    'aix', 'android', 'darwin', 'dragonfly', 'freebsd', 'hurd', 'illumos',
    'ios', 'linux', 'netbsd', 'openbsd', 'solaris',
])
