"""
Windows service host.

    python -m print_agent.winservice install
    net start PrintAgentService
    net stop PrintAgentService

Control events from the service manager are translated and passed to the
ServiceController; state changes are reported back with
ReportServiceStatus. There is no console here, set LOG_FILE.
"""
import sys

import servicemanager
import win32service
import win32serviceutil
import winerror

from print_agent import __version__
from print_agent.env import SERVICE_NAME
from print_agent.lifecycle import ControlResult, ServiceControl, ServiceController, ServiceState
from print_agent.main import build_server, configure_logging

_STATUS = {
    ServiceState.STARTING: win32service.SERVICE_START_PENDING,
    ServiceState.RUNNING: win32service.SERVICE_RUNNING,
    ServiceState.STOP_REQUESTED: win32service.SERVICE_STOP_PENDING,
    ServiceState.STOPPED: win32service.SERVICE_STOPPED,
}

_CONTROLS = {
    win32service.SERVICE_CONTROL_STOP: ServiceControl.STOP,
    win32service.SERVICE_CONTROL_INTERROGATE: ServiceControl.INTERROGATE,
}

# codes 128-255 are reserved for user-defined controls
_USER_CONTROL_RANGE = range(128, 256)


class PrintAgentService(win32serviceutil.ServiceFramework):
    _svc_name_ = SERVICE_NAME
    _svc_display_name_ = "Print Agent"
    _svc_description_ = f"Local PDF/HTML/URL print endpoint (v{__version__})"

    def __init__(self, args):
        configure_logging()
        self.controller = ServiceController(build_server(), report=self._report)
        # registers the control handler; a failure here aborts the service
        super().__init__(args)

    def _report(self, state: ServiceState):
        self.ReportServiceStatus(_STATUS[state])

    def ServiceCtrlHandlerEx(self, control, event_type, data):
        if control in _CONTROLS:
            result = self.controller.handle_control(_CONTROLS[control])
        elif control in _USER_CONTROL_RANGE:
            result = self.controller.handle_control(ServiceControl.USER_EVENT, code=control)
        else:
            result = self.controller.handle_control(ServiceControl.OTHER)

        if result == ControlResult.NOT_IMPLEMENTED:
            return winerror.ERROR_CALL_NOT_IMPLEMENTED
        return winerror.NO_ERROR

    def SvcRun(self):
        # the controller reports every state itself
        self.SvcDoRun()

    def SvcDoRun(self):
        servicemanager.LogMsg(
            servicemanager.EVENTLOG_INFORMATION_TYPE,
            servicemanager.PYS_SERVICE_STARTED,
            (self._svc_name_, ""),
        )
        self.controller.run()


def main():
    if len(sys.argv) == 1:
        # started by the service manager
        servicemanager.Initialize()
        servicemanager.PrepareToHostSingle(PrintAgentService)
        servicemanager.StartServiceCtrlDispatcher()
    else:
        win32serviceutil.HandleCommandLine(PrintAgentService)


if __name__ == "__main__":
    main()
