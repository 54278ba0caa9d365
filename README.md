# minios

`minios` is a small simulated shell. It keeps a virtual directory tree, a
list of users and a list of groups in plain text files, asks you to log in
as one of the users, and then takes commands at a prompt of the form
`name@1-os-linux:/route#`.

## Data layout

The shell works from a base directory (by default `information`, relative
to where it is started) holding:

- `Directory.txt` – one line per node:
  `name type visible mode uid gid size month day hour minute parent-route`.
  The root is the line named `root` whose parent route is `/`.
- `User.txt` – one line per user:
  `name uid gid year month day hour minute sec wday home-dir`.
  The first `root` line starts the list; later `root` lines are ignored.
- `Group.txt` – one line per group: `name gid`.
- `resources/file/` – the contents of regular files, stored by file name.
  Archives made by `zip` are stored under their route inside this
  directory.

A missing `User.txt` or `Group.txt` is reported and treated as empty; a
missing or rootless `Directory.txt` stops the program.

## Running

```
pip install .
minios
minios --base path/to/information
```

The list of users is shown first; type a name at `Login:` to begin. After
login the current and home directory is the user's home directory from
`User.txt` (the root when it is empty). The shell runs until its input ends.

## Commands

| Command | What it does |
| --- | --- |
| `ls [-a \| -l \| -al \| -la] [path ...]` | list a directory, optionally with hidden entries and details |
| `cd [path \| ~ \| -]` | change the current directory; `-` goes back and prints the route |
| `pwd [-L \| -P \| --help]` | print the current directory |
| `mkdir [-m mode] [-p] path ...` | create directories (default mode `755`) |
| `chmod mode path ...` | change permission bits; for files the stored file's mode too |
| `cat [-n] file ...` | print files, optionally numbering lines |
| `cat > file`, `cat >> file` | write or append standard input to a file; input ends at end of file or a line starting with Ctrl+D |
| `cp [-r] source dest` | copy a file, or with `-r` a directory, into a directory or under a new name |
| `mv [-r] source dest` | move into an existing directory, or otherwise rename |
| `rmdir [-r] path ...` | remove directories (at most 50 at once) |
| `adduser [-u uid] [-g gid] name` | add a user (uid and gid default to 1000) and append it to `User.txt` |
| `zip archive.zip file ...` | pack files with run-length encoding into the current directory |
| `unzip archive.zip` | unpack an archive made by `zip`, numbering names already taken |
| `clear` | clear the screen |

Changes to the tree are written back to `Directory.txt` as they happen.
Path lookup ignores case; `.` and `..` are understood.

## Using it from Python

```python
from minios.accounts import Accounts
from minios.directory import DirectoryTree
from minios.shell import Shell

tree = DirectoryTree.load("information")
accounts = Accounts.load("information")
shell = Shell(tree, accounts, accounts.users[0])

print(shell.execute("mkdir -p docs/notes"), end="")
print(shell.execute("ls -l docs"), end="")
```

`Shell.execute` runs one command line and returns what it would print;
`Shell.run(stdin, stdout)` is the interactive loop. Lower-level pieces live
in their own modules:

- `minios.directory` – `DirectoryTree` (`load`, `find`, `walk`, `save`,
  `file_path`) and `Directory` nodes
- `minios.accounts` – `Accounts`, `User`, `Group`, `load_users`,
  `load_groups`
- `minios.permission` – `parse_mode`, `format_mode`, `permission_string`
- `minios.archive` – `rle_compress`, `rle_decompress`, `zip_files`,
  `unzip_files`
- `minios.navigation`, `minios.mkdir`, `minios.removal`,
  `minios.transfer`, `minios.cat`, `minios.display` – the individual
  commands and rendering

## What it does not do

- Login asks only for a user name; there are no passwords.
- There is no command to delete a single file; `rmdir -r` removes a
  directory with its files.
- Groups can only be read from `Group.txt`; there is no command to add one.
- Nothing is executed: the shell only manages its own virtual tree.

## Tests

```
pip install .[test]
pytest
```