class CoreInjectError(RuntimeError):
    ''' base class for all errors raised by coreinject
    '''
    pass

class UsageError(CoreInjectError):
    ''' raised when the command line does not name a core file and a symbol map
    '''
    pass

class DataOptionError(CoreInjectError):
    ''' raised for a malformed --data= option or an unknown option
    '''
    def __init__(self, msg, arg):
        super(DataOptionError, self).__init__("%s: %s" % (msg, arg))
        self.arg = arg

class InjectError(CoreInjectError):
    ''' raised when a single direct or indirect injection cannot be completed
        The engine reports these and carries on with the next injection.
    '''
    def __init__(self, msg, ident):
        super(InjectError, self).__init__(msg)
        self.ident = ident

class SourceOpenError(InjectError):
    pass

class SeekError(InjectError):
    pass

class AllocationError(InjectError):
    pass

class ShortReadError(InjectError):
    pass

class ShortWriteError(InjectError):
    pass
