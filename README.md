# cityreports

Tools for keeping inspection reports per city district. A district is a
directory holding a binary `reports.dat` file of fixed-size records, an empty
`district.cfg` file and a `logged_district` log. Everything works relative to
the current directory.

Four commands are installed:

- `city-manager` creates and removes districts, files, lists and removes
  reports, and takes or checks a snapshot of the current directory.
- `city-scorer` sums report severities per inspector for one district.
- `city-monitor` writes its PID to `.monitor_pid` and prints a notice each
  time it receives `SIGUSR1`, until interrupted.
- `city-hub` is an interactive shell that starts the monitor and runs the
  scorer over several districts.

The package has no dependencies beyond the standard library. It relies on
POSIX signals (`SIGUSR1`), so it is meant for Unix-like systems.

## Installing

```
pip install .
```

## Managing districts and reports

Every `city-manager` call names a role and a user before the command:

```
city-manager --role manager --user alice --add-district north
city-manager --role inspector --user alice --report north 3 "Broken street light"
city-manager --role inspector --user alice --list north
city-manager --role inspector --user alice --list north severity:>=:2
city-manager --role manager --user alice --remove-report north 1700000000
city-manager --role manager --user alice --remove-district north
```

- `--add-district`, `--remove-report` and `--remove-district` (also spelled
  `remove_district`) need the `manager` role; otherwise the command prints
  `Invalid command or insufficient permissions.`
- `--report <district> <severity> <description>` appends a report whose id and
  timestamp are the current Unix time, with category `General`. It replaces a
  symlink `link_<district>` pointing at the reports file, and appends a line to
  the district's `logged_district` saying whether the monitor named in
  `.monitor_pid` could be sent `SIGUSR1`.
- `--list <district> [filter]` prints the file's permissions and size and one
  line per report. A filter has the form `field:operator:value`: `severity`
  accepts `==`, `>=`, `<=`, `>` and `<`, and `category` matches the value
  exactly. Any other field lets every report through.
- `--remove-report <district> <id>` deletes every report with that id.
- `--remove-district <district>` deletes the directory tree and any
  `active_reports-<district>` link.

Snapshots:

```
city-manager --role inspector --user alice --snapshot
city-manager --role inspector --user alice --update
```

`--snapshot` writes `snapshot.txt` with the path, size, permission bits (in
octal) and modification time of every entry below the current directory;
`--update` prints `[MISSING]: <path>` or `[MODIFIED]: <path>` for entries that
have since gone or changed.

## Scoring

```
city-scorer north
```

prints one `Inspector: <name>, Workload Score: <n>` line per inspector, in the
order inspectors first appear, counting at most 256 inspectors.

## Monitoring

```
city-monitor
```

It refuses to start if `.monitor_pid` already holds a valid PID. Every line it
prints has the form `KIND:message` (`INFO`, `NOTICE`, `ERROR`, `EXIT`). Stop it
with Ctrl-C; it then removes `.monitor_pid`.

## The hub

```
city-hub
city_hub> start_monitor
city_hub> calculate_scores north south
city_hub> exit
```

`start_monitor` runs the monitor in the background and relays its output,
adding `MONITOR HUB: monitor ended.` after an `EXIT:` or `ERROR:` line.
`calculate_scores` runs the scorer for every district that exists, skipping the
rest with a warning, and prints a combined report. `quit` or `exit` (or end of
input) leaves the hub; unknown commands print the list of available ones. The
hub has no command to stop a monitor it started: send it `SIGINT` yourself.

## From Python

```python
from cityreports.records import Report, append_report, read_reports
from cityreports.scorer import workload_scores

append_report("north/reports.dat",
              Report(id=1, inspector="alice", severity=2, timestamp=0,
                     description="Pothole"))

for report in read_reports("north/reports.dat"):
    print(report.id, report.severity, report.description)

print(workload_scores("north"))
```

Text fields are stored in 64-byte slots; longer values are cut to fit.